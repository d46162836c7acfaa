"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Dhan Mantri"
    DB_FILENAME = "dhanmantri.db"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}
    SUBSCRIPTION_CYCLE_DAYS = 30
    DUE_SOON_DAYS = 7
    CHAT_HISTORY_LIMIT = 20
    TESTING = False
    DEBUG = False

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("DHANMANTRI_SECRET_KEY", "replace-me")
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("DHANMANTRI_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("DHANMANTRI_DATABASE_URL", self._build_sqlite_url())
        self.CURRENCY_SYMBOL = os.getenv("DHANMANTRI_CURRENCY_SYMBOL", "₹")
        self.MFAPI_BASE_URL = os.getenv("DHANMANTRI_MFAPI_BASE_URL", "https://api.mfapi.in")
        self.MFAPI_TIMEOUT = _env_float("DHANMANTRI_MFAPI_TIMEOUT", 10.0)
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("DHANMANTRI_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("DHANMANTRI_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {"pool_pre_ping": True}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True


class TestConfig(BaseConfig):
    """Configuration used by the test-suite."""

    TESTING = True
