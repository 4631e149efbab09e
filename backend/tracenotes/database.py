"""
TraceNotes Backend - Database Engine Setup
===========================================

What:  Async SQLAlchemy engine builder and the declarative Base for ORM rows.
How:   `build_engine()` turns Settings into an AsyncEngine with connection
       pooling; the SQL storage backend owns the engine and disposes it on
       shutdown.
Who:   Used by the storage factory (storage_backend=sql), the ORM model,
       and Alembic.
When:  Engine is created once by the app factory; sessions per storage call.

Connection Pooling Strategy (server databases only):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

SQLite URLs (used by the test suite) get SQLAlchemy's default pool; the
queue-pool sizing arguments are not accepted there.
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from tracenotes.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for --autogenerate.
    """
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for `settings.database_url`.

    Example:
        engine = build_engine(settings)
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    """
    url = make_url(settings.database_url)
    echo = settings.log_level == "DEBUG"

    if url.get_backend_name() == "sqlite":
        return create_async_engine(url, echo=echo)

    return create_async_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=echo,
    )
