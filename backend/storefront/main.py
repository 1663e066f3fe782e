from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api.health import router as health_router
from storefront.api.routes_cart import router as cart_router
from storefront.api.routes_order import router as order_router
from storefront.config import settings
from storefront.db import init_db
from storefront.errors import InvalidArgument, StoreError, TransactionFailed
from storefront.utils.logging import get_logger
from storefront.utils.responses import failure, store_error

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("storefront started")
    yield


app = FastAPI(title="Storefront - Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)

app.include_router(cart_router)

app.include_router(order_router)


@app.exception_handler(StoreError)
async def handle_store_error(request: Request, exc: StoreError):
    return store_error(exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]
    return failure(400, "Invalid request", InvalidArgument.kind, {"errors": errors})


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    kind = {401: "Unauthorized", 404: "NotFound"}.get(exc.status_code, "HTTPError")
    return failure(exc.status_code, str(exc.detail), kind)


@app.exception_handler(SQLAlchemyError)
async def handle_storage_error(request: Request, exc: SQLAlchemyError):
    logger.exception("storage failure on %s %s", request.method, request.url.path)
    return failure(TransactionFailed.status_code, "storage failure", TransactionFailed.kind)


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    # still an envelope with a kind, never a bare text/plain 500
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return failure(500, "internal error", TransactionFailed.kind)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.APP_HOST, port=settings.APP_PORT)
