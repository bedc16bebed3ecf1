"""
Storage Backend Contract.

A backend knows how to read the whole persisted user collection and how to
replace it in full.  The store never writes incrementally: every mutation
hands the complete collection to :meth:`StorageBackend.save`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from userstore.logger import StructuredLogger
from userstore.models.user import UserCollection


class StorageBackend(ABC):
    """Base class for persisted-source backends. Receives the logger via __init__."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger = logger

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of the persisted source."""

    @abstractmethod
    def load(self) -> Optional[object]:
        """Return the raw persisted value, or ``None`` when there is no usable data.

        Implementations must not raise for a missing or corrupt source;
        the store treats both as an empty collection.
        """

    @abstractmethod
    def save(self, collection: UserCollection) -> None:
        """Overwrite the persisted source with *collection*.

        Raises
        ------
        PersistTargetMissingError
            If the persisted source does not exist.
        StoreError
            If the source exists but cannot be written.
        """

    def close(self) -> None:
        """Release any handle held on the persisted source. Default: nothing held."""
