from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from storefront.errors import StoreError


def success(message: str, data: Any = None, meta: Any = None, status_code: int = 200) -> JSONResponse:
    body = {"success": True, "message": message, "data": data, "error": None}
    if meta is not None:
        body["meta"] = meta
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def failure(status_code: int, message: str, kind: str, data: Optional[dict] = None) -> JSONResponse:
    body = {"success": False, "message": message, "data": data, "error": kind}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def store_error(exc: StoreError) -> JSONResponse:
    return failure(exc.status_code, exc.message, exc.kind, exc.details or None)
