"""SQLAlchemy engine used by finders.

Single shared engine, created lazily from settings.  Applications that
already own an engine install it with `set_engine()` before the first
finder runs.
"""
from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from sqlfinder.core.config import get_settings
from sqlfinder.core.logging import get_logger

logger = get_logger(__name__)

_engine: Engine | None = None


def get_engine() -> Engine:
    """Return the shared SQLAlchemy engine (lazy-created, cached)."""
    global _engine
    if _engine is None:
        settings = get_settings()
        kwargs: dict = {"echo": settings.echo_sql, "pool_pre_ping": settings.pool_pre_ping}
        if not settings.is_sqlite:
            kwargs.update(pool_size=5, max_overflow=10)
        _engine = create_engine(settings.database_url, **kwargs)
        logger.info("DB engine created  dialect=%s", _engine.dialect.name)
    return _engine


def set_engine(engine: Engine) -> None:
    """Install *engine* as the shared engine."""
    global _engine
    _engine = engine
    logger.info("DB engine installed  dialect=%s", engine.dialect.name)


def reset_engine() -> None:
    """Dispose the shared engine; the next get_engine() builds a new one."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None
