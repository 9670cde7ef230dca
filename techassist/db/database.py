"""
Relational store: engine, session factory and FastAPI dependency.

SQLite is the default backend (WAL journal so query traffic can read
while ingestion writes); any SQLAlchemy URL works.
"""

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import QueuePool

from techassist.core.config import settings
from techassist.utils.logging import get_logger

logger = get_logger("techassist.db")

SQLITE_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
    "PRAGMA temp_store=MEMORY",
)


class Base(DeclarativeBase):
    """Base class for all ORM models."""


def _apply_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    cursor = dbapi_conn.cursor()
    try:
        for pragma in SQLITE_PRAGMAS:
            cursor.execute(pragma)
    except Exception as e:
        # WAL is unavailable on some filesystems; SQLite defaults still work
        logger.warning("Could not set SQLite pragmas: %s", e)
    finally:
        cursor.close()


def build_engine(database_url: str, **overrides: Any) -> Engine:
    """
    Create an engine for ``database_url`` using the pool settings.

    ``overrides`` are passed through to ``create_engine`` (tests use
    ``poolclass=StaticPool`` for in-memory databases).
    """
    is_sqlite = database_url.startswith("sqlite")

    if is_sqlite:
        kwargs: dict[str, Any] = {
            "connect_args": {
                "check_same_thread": settings.sqlite_check_same_thread,
                "timeout": settings.sqlite_timeout,
            },
            "poolclass": QueuePool,
            "pool_size": settings.pool_size,
            "max_overflow": settings.max_overflow,
            "pool_pre_ping": settings.pool_pre_ping,
        }
    else:
        kwargs = {
            "poolclass": QueuePool,
            "pool_size": settings.pool_size,
            "max_overflow": settings.max_overflow,
            "pool_pre_ping": settings.pool_pre_ping,
            "pool_recycle": settings.pool_recycle,
            "pool_timeout": settings.pool_timeout,
        }

    kwargs.update(overrides)
    if kwargs.get("poolclass") is not QueuePool:
        for key in ("pool_size", "max_overflow", "pool_recycle", "pool_timeout"):
            kwargs.pop(key, None)

    new_engine = create_engine(database_url, echo=False, **kwargs)
    if is_sqlite:
        event.listen(new_engine, "connect", _apply_sqlite_pragmas)
    return new_engine


engine = build_engine(settings.database_url)

# One Session per request/task
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)


def get_db() -> Iterator[Session]:
    """FastAPI dependency: ``db: Session = Depends(get_db)``."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_context() -> Iterator[Session]:
    """Session outside request scope; commits on success."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(target: Engine | None = None) -> bool:
    """
    Check connectivity and create any missing tables.

    Returns False (and logs) instead of raising so startup can decide.
    """
    from techassist.db import models  # noqa: F401  registers tables on Base

    target = target or engine
    try:
        with target.connect() as conn:
            conn.execute(text("SELECT 1"))
        Base.metadata.create_all(bind=target)
    except Exception as e:
        logger.error("[FAIL] Database initialization failed: %s", e)
        return False

    logger.info("[OK] Database ready (%s)", target.url.render_as_string(hide_password=True))
    return True
