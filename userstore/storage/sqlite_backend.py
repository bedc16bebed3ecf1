"""
Embedded SQLite Backend.

Stores the user collection in a single key-value table::

    users
    ├── position INTEGER PRIMARY KEY   (1-based collection position)
    └── record   TEXT NOT NULL         (JSON object, field -> value)

Saving keeps the whole-collection contract of the flat-file backend: all
rows are deleted and re-inserted inside one transaction, so readers in
other processes never observe a half-written collection.  The database
file itself must already exist; this backend never creates it.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from pathlib import Path
from typing import Optional

from userstore.exceptions import PersistTargetMissingError, StoreError
from userstore.logger import StructuredLogger
from userstore.models.user import UserCollection
from userstore.storage.base import StorageBackend

_CREATE_TABLE: str = """
    CREATE TABLE IF NOT EXISTS users (
        position INTEGER PRIMARY KEY,
        record TEXT NOT NULL
    )
"""


class SQLiteBackend(StorageBackend):
    """Persists the collection to a local SQLite database file.

    Parameters
    ----------
    path:
        Filesystem path of an existing SQLite database file (an empty
        file is a valid, empty database).
    logger:
        Structured logger instance.
    """

    def __init__(self, path: Path, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._path: Path = Path(path)
        self._write_lock: threading.RLock = threading.RLock()
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def location(self) -> str:
        return f"sqlite://{self._path}"

    # ------------------------------------------------------------------
    # StorageBackend API
    # ------------------------------------------------------------------

    def load(self) -> Optional[object]:
        if not self._path.is_file():
            self._logger.info("No SQLite database at %s.", self._path)
            return None

        try:
            rows = self._connection().execute(
                "SELECT position, record FROM users ORDER BY position"
            ).fetchall()
        except sqlite3.Error as exc:
            self._logger.warning(
                "Could not read users from %s (%s); treating as empty.",
                self._path,
                exc,
            )
            return None

        collection: UserCollection = {}
        try:
            for row in rows:
                collection[int(row["position"])] = json.loads(row["record"])
        except (TypeError, ValueError) as exc:
            self._logger.warning(
                "Corrupt user row in %s (%s); treating as empty.", self._path, exc,
            )
            return None
        return collection

    def save(self, collection: UserCollection) -> None:
        if not self._path.is_file():
            self._logger.error("Persisted source not found: %s", self._path)
            raise PersistTargetMissingError(self._path)

        with self._write_lock:
            try:
                rows = [
                    (position, json.dumps(record, ensure_ascii=False))
                    for position, record in collection.items()
                ]
            except (TypeError, ValueError) as exc:
                self._logger.error("Cannot serialize users for %s: %s", self._path, exc)
                raise StoreError(
                    f"Cannot serialize users for {self._path}: {exc}", original_error=exc,
                ) from exc

            try:
                conn = self._connection()
                conn.execute(_CREATE_TABLE)
                conn.execute("DELETE FROM users")
                conn.executemany(
                    "INSERT INTO users (position, record) VALUES (?, ?)", rows,
                )
                conn.commit()
            except sqlite3.Error as exc:
                self._rollback()
                self._logger.error(
                    "SQLite rewrite of %s rolled back.", self._path, exc_info=True,
                )
                raise StoreError(
                    f"Could not write users to {self.location}: {exc}", original_error=exc,
                ) from exc
        self._logger.debug(
            "Persisted %d user(s) to %s.", len(collection), self.location,
        )

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the SQLite connection. Safe to call multiple times."""
        with self._write_lock:
            if self._conn is not None:
                try:
                    self._conn.close()
                except sqlite3.ProgrammingError:
                    pass
                self._conn = None

    def _rollback(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.rollback()
        except sqlite3.Error as exc:
            self._logger.warning("Rollback on %s failed: %s", self._path, exc)

    def _connection(self) -> sqlite3.Connection:
        with self._write_lock:
            if self._conn is None:
                self._conn = sqlite3.connect(str(self._path), check_same_thread=False)
                self._conn.row_factory = sqlite3.Row
                self._logger.info("SQLite database opened at %s", self._path)
            return self._conn
