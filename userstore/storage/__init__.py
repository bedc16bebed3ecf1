"""
Storage Backend Package.

Backends own the persisted source; the store only ever calls ``load()``
once and ``save()`` after each mutation.

Usage:
    from userstore.storage import create_backend
    backend = create_backend(config, logger)
"""

from __future__ import annotations

from userstore.config import AppConfig
from userstore.logger import StructuredLogger
from userstore.models.enums import BackendKind
from userstore.storage.base import StorageBackend
from userstore.storage.literal_file import LiteralFileBackend
from userstore.storage.sqlite_backend import SQLiteBackend

__all__ = [
    "LiteralFileBackend",
    "SQLiteBackend",
    "StorageBackend",
    "create_backend",
]


def create_backend(config: AppConfig, logger: StructuredLogger) -> StorageBackend:
    """Build the backend selected by ``config.STORAGE_BACKEND``."""
    if config.STORAGE_BACKEND == BackendKind.SQLITE:
        return SQLiteBackend(path=config.SQLITE_PATH, logger=logger)
    return LiteralFileBackend(path=config.USERS_REPOSITORY_PATH, logger=logger)
