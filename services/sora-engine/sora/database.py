import json
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from sora.config import get_settings

logger = logging.getLogger(__name__)


def safe_json_loads(value, default=None):
    """Safely parse JSON from DB value (PostgreSQL JSONB dict or SQLite TEXT string).

    PostgreSQL JSONB columns return Python dict/list directly.
    SQLite stores JSON as text when read through a raw SQL query.
    """
    if value is None:
        return default if default is not None else {}
    if not isinstance(value, str):
        return value  # Already parsed (PostgreSQL JSONB → dict/list)
    value = value.strip()
    if not value:
        return default if default is not None else {}
    try:
        return json.loads(value)
    except (json.JSONDecodeError, ValueError):
        logger.warning("Failed to parse JSON from DB value: %.100s...", value)
        return default if default is not None else {}


class Base(DeclarativeBase):
    pass


settings = get_settings()

if settings.db_type == "sqlite":
    sync_engine = create_engine(
        settings.database_url,
        connect_args={"check_same_thread": False},
        echo=False,
    )
else:
    sync_engine = create_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_pool_overflow,
        pool_pre_ping=True,
        echo=False,
    )
SyncSessionLocal = sessionmaker(bind=sync_engine, expire_on_commit=False)


def get_sync_session():
    """Dependency for endpoints that read or write studies."""
    session = SyncSessionLocal()
    try:
        yield session
    finally:
        session.close()


def init_db():
    """Create missing tables."""
    import sora.models.study  # noqa: F401  registers the table on Base

    Base.metadata.create_all(bind=sync_engine)
    logger.info("Database schema ready (%s)", settings.db_type)
