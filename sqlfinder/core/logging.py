"""
Logging for finder definition and invocation.
"""
from __future__ import annotations

import logging
import sys

from sqlfinder.core.config import get_settings


def get_logger(name: str) -> logging.Logger:
    settings = get_settings()
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        fmt = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    return logger


_SQL_PREVIEW_CHARS = 2000


def log_sql(logger: logging.Logger, qualname: str, sql: str) -> None:
    """Log rendered finder SQL at DEBUG unless disabled by settings."""
    if not get_settings().log_sql or not logger.isEnabledFor(logging.DEBUG):
        return
    if len(sql) > _SQL_PREVIEW_CHARS:
        sql = sql[:_SQL_PREVIEW_CHARS] + f"... ({len(sql)} chars)"
    logger.debug("%s SQL: %s", qualname, sql)
