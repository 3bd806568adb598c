"""
Centralised finder settings loaded from environment / .env file.
"""
from __future__ import annotations

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env from project root (two levels up from this file)
_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseSettings):
    # ── Database ─────────────────────────────────────────
    database_url: str = "sqlite+pysqlite:///:memory:"
    echo_sql: bool = False
    pool_pre_ping: bool = True

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"
    log_sql: bool = True  # rendered finder SQL at DEBUG

    # ── Declarative definitions ──────────────────────────
    definitions_path: str | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    class Config:
        env_prefix = "SQLFINDER_"
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()
