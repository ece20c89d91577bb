import importlib.util
import logging
from contextlib import contextmanager
from typing import Iterator, Optional
from urllib.parse import urlparse

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.core.errors import StoreError


class Base(DeclarativeBase):
    pass


settings = get_settings()
logger = logging.getLogger(__name__)


def _resolve_database_url(database_url: str) -> str:
    if not database_url.startswith("postgresql://"):
        return database_url
    has_psycopg2 = importlib.util.find_spec("psycopg2") is not None
    has_psycopg3 = importlib.util.find_spec("psycopg") is not None
    if not has_psycopg2 and has_psycopg3:
        return database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return database_url


def _is_memory_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite") and (
        database_url.rstrip("/").endswith(":") or ":memory:" in database_url
    )


def _build_connect_args(database_url: str) -> dict:
    parsed = urlparse(database_url)
    if parsed.scheme.startswith("sqlite"):
        # Sessions are handed to FastAPI's threadpool.
        return {"check_same_thread": False}
    if not parsed.scheme.startswith("postgresql"):
        return {}

    connect_args = {
        "keepalives": 1,
        "keepalives_idle": 30,
        "keepalives_interval": 10,
        "keepalives_count": 5,
    }
    local_hosts = {"localhost", "127.0.0.1", "db"}
    if parsed.hostname not in local_hosts:
        connect_args["sslmode"] = "require"
    return connect_args


database_url = _resolve_database_url(str(settings.database_url))

_pool_kwargs = {}
if database_url.startswith("postgresql"):
    configured_pool_size = int(settings.db_pool_size)
    configured_max_overflow = int(settings.db_max_overflow)
    configured_pool_timeout = int(settings.db_pool_timeout)

    pool_size = max(5, configured_pool_size)
    max_overflow = max(5, configured_max_overflow)
    pool_timeout = max(8, configured_pool_timeout)

    if (
        pool_size != configured_pool_size
        or max_overflow != configured_max_overflow
        or pool_timeout != configured_pool_timeout
    ):
        logger.warning(
            "Adjusted DB pool settings: pool_size %s->%s, max_overflow %s->%s, pool_timeout %s->%s",
            configured_pool_size,
            pool_size,
            configured_max_overflow,
            max_overflow,
            configured_pool_timeout,
            pool_timeout,
        )

    _pool_kwargs = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": settings.db_pool_recycle,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_timeout": pool_timeout,
        "pool_use_lifo": True,
    }
elif _is_memory_sqlite(database_url):
    # One shared connection, otherwise every session sees its own empty database.
    _pool_kwargs = {"poolclass": StaticPool}


def _serialize_sqlite_writers(engine) -> None:
    # pysqlite defers BEGIN until the first write, so a balance read would take no
    # lock. Let SQLAlchemy emit BEGIN IMMEDIATE itself: the reserved lock is held
    # from the first statement of the unit of work until commit or rollback.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, *, connect_args: Optional[dict] = None, **kwargs):
    args = _build_connect_args(url)
    args.update(connect_args or {})
    built = create_engine(url, connect_args=args, **kwargs)
    if url.startswith("sqlite") and not _is_memory_sqlite(url):
        _serialize_sqlite_writers(built)
    return built


engine = build_engine(database_url, **_pool_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Run a unit of work that either commits as a whole or leaves no trace.

    Any exception rolls the session back before it propagates; driver and ORM
    failures are re-raised as ``StoreError``.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Store transaction aborted: %s", exc)
        raise StoreError("Ledger store failure") from exc
    except Exception:
        db.rollback()
        raise
