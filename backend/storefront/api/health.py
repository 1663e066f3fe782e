from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from storefront.db import read_only_connection
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", tags=["health"])
def health():
    db_ok = False
    try:
        with read_only_connection() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except SQLAlchemyError as e:
        logger.warning("health: database check failed: %s", e)

    return {
        "status": "ok" if db_ok else "degraded",
        "db": db_ok,
    }
