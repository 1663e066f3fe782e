import importlib
import os

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from storefront.config import settings
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DATABASE_URL = settings.DATABASE_URL
_is_sqlite = DATABASE_URL.startswith("sqlite")

engine = create_engine(
    DATABASE_URL,
    future=True,
    echo=settings.DB_ECHO,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


if _is_sqlite:
    # pysqlite defers BEGIN until the first write, which lets two checkouts read
    # the same stock before either writes. Take over transaction control and
    # start every transaction as IMMEDIATE so writers are serialized.
    # Connections marked read_only=True get a plain deferred BEGIN and never
    # wait on the write lock.
    @event.listens_for(engine, "connect")
    def _sqlite_on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _sqlite_on_begin(conn):
        if conn.get_execution_options().get("read_only"):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")


def read_only_connection():
    """Engine connection for lookups that must not take the SQLite write lock."""
    return engine.connect().execution_options(read_only=True)


MODEL_MODULES = [
    "storefront.models.product",
    "storefront.models.cart",
    "storefront.models.cart_item",
    "storefront.models.order",
]


def init_db(reset: bool = False):
    """
    Initialize DB schema.

    Behavior:
      - If `reset` is true or RESET_DB env var is set to 1/true/yes, drop & recreate tables.
      - Otherwise, leave existing tables in place and create missing ones.

    All model modules are imported first so metadata is populated.
    """
    env_reset = os.environ.get("RESET_DB", "false").lower() in ("1", "true", "yes")

    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if reset or env_reset:
        logger.info("Resetting database schema")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized (%s tables)", len(Base.metadata.tables))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
