"""Exceptions raised by the user store."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class StoreError(Exception):
    """Base exception for user store failures."""

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        self.message: str = message
        self.original_error: Optional[Exception] = original_error
        super().__init__(self.message)


class PersistTargetMissingError(StoreError):
    """Raised when the persisted source does not exist at write time.

    The in-memory collection already reflects the attempted change when
    this is raised; nothing is rolled back.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path: Path = Path(path)
        super().__init__(f"Persisted source not found: {self.path}")
