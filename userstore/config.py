"""
Application Configuration.

Pydantic Settings model for the user store.  All configuration is loaded
from environment variables and an optional ``.env`` file.  Inject an
AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings

from userstore.models.enums import BackendKind


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Persisted source ---
    STORAGE_BACKEND: BackendKind = BackendKind.FILE
    USERS_REPOSITORY_PATH: Path = Path("data/users.repo")
    SQLITE_PATH: Path = Path("data/users.sqlite3")

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "userstore.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def persisted_source(self) -> Path:
        """Path of the persisted source for the selected backend."""
        if self.STORAGE_BACKEND == BackendKind.SQLITE:
            return self.SQLITE_PATH
        return self.USERS_REPOSITORY_PATH

    @model_validator(mode="after")
    def _warn_missing_source(self) -> "AppConfig":
        """Emit a startup warning when the persisted source does not exist.

        Loading tolerates a missing source (the store starts empty), but
        the first ``add``/``update`` will fail with
        ``PersistTargetMissingError`` until the file is created.
        """
        _log = logging.getLogger("userstore.config")

        if not self.persisted_source.exists():
            _log.warning(
                "Persisted source '%s' does not exist. The store will start "
                "empty and mutations will fail until it is created.",
                self.persisted_source,
            )

        return self


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    On first call, creates an ``AppConfig`` instance (reading from ``.env``).
    Subsequent calls return the same instance.  Uses a check-lock-check
    pattern to avoid the lock overhead on the fast path.

    Prefer constructor injection of ``AppConfig`` in new code.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next ``get_config()`` re-reads the environment."""
    global _config_instance
    with _config_lock:
        _config_instance = None
