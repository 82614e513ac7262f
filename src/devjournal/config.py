"""Application configuration objects and helpers."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``."""

    platform_id = (platform or sys.platform).lower()
    environ = dict(os.environ if env is None else env)
    home_dir = Path(home or Path.home())
    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = home_dir / "Library" / "Application Support"
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return base.expanduser() / sanitized


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "DevJournal"
    DB_FILENAME = "dev_journal.db"
    BACKUP_DIRNAME = "backups"
    BACKUP_RETENTION = 10
    SQLITE_PRAGMAS = {
        "journal_mode": "wal",
        "synchronous": "normal",
        "foreign_keys": "on",
        "busy_timeout": "5000",
    }

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("DEVJOURNAL_DEV_MODE", default=True)
        self.LOG_LEVEL = os.getenv("DEVJOURNAL_LOG_LEVEL", "INFO").upper()
        self.DATABASE_URL = os.getenv("DEVJOURNAL_DATABASE_URL", self._build_sqlite_url())

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the database, logs and backups live.

        Resolution never creates the directory; the storage layer does that so
        permission problems surface as ``StorageUnavailable``.
        """

        override = os.getenv("DEVJOURNAL_DATA_DIR")
        if override:
            return Path(override).expanduser().resolve()
        return get_default_data_dir(self.APP_NAME)

    def _build_sqlite_url(self) -> str:
        return f"sqlite:///{self.db_path.as_posix()}"

    @property
    def db_path(self) -> Path:
        return Path(self.DATA_DIR) / self.DB_FILENAME

    @property
    def backup_dir(self) -> Path:
        return Path(self.DATA_DIR) / self.BACKUP_DIRNAME

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        # Access is serialized by the Database lock, so worker threads may share
        # pooled connections.
        connect_args: dict[str, Any] = {"check_same_thread": False}
        return {"connect_args": connect_args, "echo": False}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration rooted at an explicit directory, used by tests and tools."""

    __test__ = False  # keep pytest from collecting this as a test class

    DEBUG = False
    TESTING = True

    def __init__(self, data_dir: Path | str) -> None:
        self._data_dir = Path(data_dir)
        super().__init__()
        self.DATABASE_URL = self._build_sqlite_url()

    def _resolve_data_dir(self) -> Path:
        return self._data_dir


__all__ = ["BaseConfig", "DevConfig", "TestConfig", "get_default_data_dir"]
