"""
User Store.

Owns the in-memory user collection.  The collection is loaded from the
storage backend on first access and kept for the lifetime of the store
object; every ``add``/``update`` rewrites the whole persisted source.

One ``UserStore`` is built per process by the composition root
(:func:`userstore.services.create_services`) and passed to consumers.
The store assumes a single writer and holds no lock around the
collection.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

from userstore.logger import StructuredLogger
from userstore.models.enums import KeyRole
from userstore.models.schema import DEFAULT_SCHEMA, UserSchema
from userstore.models.user import UserCollection, UserRecord
from userstore.storage.base import StorageBackend


class UserStore:
    """Data access layer for user records.

    **Matching is value-based across the whole record.**

    ``get`` and ``update`` accept a ``field`` argument, but a record
    matches when the lookup value equals *any* of its field values, not
    only the named one.  ``get`` returns the first match in insertion
    order; ``update`` mutates every match.  An empty lookup value never
    matches anything.  Loaded entries that are not mappings are skipped by
    reads and updates, and only integer positions count when ``add``
    picks the next one.

    **Writes are not rolled back.**

    The collection is mutated before the backend is asked to persist it.
    If persisting raises (for instance ``PersistTargetMissingError``), the
    in-memory change stays in place and the error reaches the caller.
    """

    def __init__(
        self,
        backend: StorageBackend,
        logger: StructuredLogger,
        schema: UserSchema = DEFAULT_SCHEMA,
    ) -> None:
        self._backend = backend
        self._logger = logger
        self._schema = schema
        self._users: UserCollection = {}
        self._initialized: bool = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Populate the collection from the backend, once.

        A loaded dict becomes the collection as-is; records are not checked
        against the schema.  Anything else (missing source, parse failure,
        a non-dict literal) leaves the store empty.  Later calls are no-ops,
        so changes made to the persisted source by other processes are not
        seen until a new store is built.
        """
        if self._initialized:
            return

        loaded = self._backend.load()
        if isinstance(loaded, dict):
            self._users = loaded
        else:
            if loaded is not None:
                self._logger.warning(
                    "Persisted source %s holds %s, not a user collection; "
                    "starting empty.",
                    self._backend.location,
                    type(loaded).__name__,
                )
            self._users = {}

        self._initialized = True
        self._logger.info(
            "User store loaded %d record(s) from %s.",
            len(self._users),
            self._backend.location,
        )

    # ------------------------------------------------------------------
    # Schema views
    # ------------------------------------------------------------------

    @property
    def schema(self) -> UserSchema:
        return self._schema

    def all_fields(self) -> tuple[str, ...]:
        return self._schema.all_fields()

    def visible_fields(self) -> tuple[str, ...]:
        return self._schema.visible_fields()

    def key_roles(self) -> dict[KeyRole, str]:
        return self._schema.key_roles()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, field: str, value: str) -> Optional[UserRecord]:
        """Return a copy of the first record holding *value* in any field.

        *field* is accepted for call-site readability only.  Returns
        ``None`` when *value* is empty or nothing matches.
        """
        if not value:
            return None

        self.initialize()
        for record in self._users.values():
            if self._matches(record, value):
                return dict(record)
        return None

    def get_all(self) -> list[UserRecord]:
        """Copies of every record, in insertion order."""
        self.initialize()
        return [
            dict(record) for record in self._users.values()
            if isinstance(record, Mapping)
        ]

    def count(self) -> int:
        self.initialize()
        return len(self._users)

    def __len__(self) -> int:
        return self.count()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, data: Mapping[str, object]) -> UserRecord:
        """Append a record built from *data* and persist the collection.

        The record has exactly ``all_fields()``: missing or ``None``
        values become ``""`` and unknown keys are dropped.  It is stored at
        one past the highest existing position (``1`` when empty).  No
        uniqueness check is made.
        """
        self.initialize()

        record: UserRecord = {
            name: self._as_value(data.get(name)) for name in self.all_fields()
        }
        position: int = max(
            (key for key in self._users if isinstance(key, int)), default=0,
        ) + 1
        self._users[position] = record

        self._logger.info("User added at position %d.", position)
        self._persist()
        return dict(record)

    def update(self, field: str, value: str, data: Mapping[str, object]) -> None:
        """Overwrite schema fields from *data* on every record holding *value*.

        A falsy value in *data* clears the field to ``""``.  The collection
        is persisted once per call, whether or not anything matched.  An
        empty *value* is a no-op and does not persist.
        """
        if not value:
            return

        self.initialize()
        known = set(self.all_fields())
        changes = {key: val for key, val in data.items() if key in known}

        matched: int = 0
        for record in self._users.values():
            if self._matches(record, value):
                matched += 1
                for key, val in changes.items():
                    record[key] = self._as_value(val) if val else ""

        self._logger.info(
            "User update on %s touched %d record(s) (fields: %s).",
            field,
            matched,
            ", ".join(changes) or "none",
        )
        self._persist()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _persist(self) -> None:
        """Hand the full collection to the backend for a complete rewrite."""
        self._backend.save(self._users)
        self._logger.info(
            "Persisted %d user(s) to %s.", len(self._users), self._backend.location,
        )

    @staticmethod
    def _matches(record: object, value: str) -> bool:
        if not isinstance(record, Mapping):
            return False
        return value in record.values()

    @staticmethod
    def _as_value(raw: object) -> str:
        if raw is None:
            return ""
        return raw if isinstance(raw, str) else str(raw)
