"""
User Management Service.

Consumer-facing operations over the user store: profile lookups,
registration and field updates.  Everything returned from here passes
through the schema's visible fields, so credential and token values
never leave the store through this service.

Architectural notes:
    - Reads and writes go through ``UserStore`` (one per process).
    - Persist failures are converted into failed ``ServiceResult``s; the
      store itself has already applied the change in memory.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

from userstore.exceptions import StoreError
from userstore.logger import StructuredLogger
from userstore.models.enums import KeyRole
from userstore.models.service_models import ServiceResult
from userstore.models.user import UserRecord
from userstore.repositories.user_repository import UserStore
from userstore.services.base_service import BaseService
from userstore.utils.audit import log_audit_event

_REDACTED: str = "<redacted>"


class UserService(BaseService):
    """Service layer for user profile operations."""

    def __init__(self, store: UserStore, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._store = store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_user(self, field: str, value: str) -> ServiceResult[dict[str, str]]:
        """Return the visible profile of the first user holding *value*."""
        if not value:
            return ServiceResult(
                success=False,
                error="A lookup value is required.",
                status_code=400,
            )

        record: Optional[UserRecord] = self._store.get(field, value)
        if record is None:
            return ServiceResult(
                success=False,
                error="User not found.",
                status_code=404,
            )
        return ServiceResult(success=True, data=self._store.schema.visible_view(record))

    def get_all_users(self) -> ServiceResult[list[dict[str, str]]]:
        """Visible profiles of every user, in insertion order."""
        schema = self._store.schema
        return ServiceResult(
            success=True,
            data=[schema.visible_view(record) for record in self._store.get_all()],
        )

    def get_credentials_field(self, role: KeyRole) -> str:
        """Physical field name that stores *role* (e.g. the password column)."""
        return self._store.schema.key_field(role)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def register_user(self, data: Mapping[str, object]) -> ServiceResult[dict[str, str]]:
        """
        Add a user and return its visible profile.

        No uniqueness check is made here or in the store; callers that
        need unique usernames must look the name up first.

        Args:
            data: Proposed field values.  Unknown keys are dropped and
                missing schema fields are stored as empty strings.
        """
        try:
            record: UserRecord = self._store.add(data)
        except StoreError as exc:
            self._logger.error("Failed to register user: %s", exc.message)
            return ServiceResult(
                success=False,
                error=f"Could not save user: {exc.message}",
                status_code=500,
            )

        username_field: str = self.get_credentials_field(KeyRole.USERNAME)
        log_audit_event(
            logger=self._logger,
            action="ADD_USER",
            entity_type="User",
            entity_id=record.get(username_field, ""),
            details={"fields": ",".join(name for name in record if record[name])},
        )
        return ServiceResult(
            success=True,
            data=self._store.schema.visible_view(record),
            status_code=201,
        )

    def update_user(
        self,
        field: str,
        value: str,
        data: Mapping[str, object],
    ) -> ServiceResult[dict[str, str]]:
        """
        Apply *data* to every user holding *value*.

        Args:
            field: Name of the field the caller is matching on.
            value: Lookup value; must be non-empty.
            data: Field values to write.  Falsy values clear the field.
        """
        if not value:
            return ServiceResult(
                success=False,
                error="A lookup value is required.",
                status_code=400,
            )

        audit_id: str = self._audit_id(value)
        try:
            self._store.update(field, value, data)
        except StoreError as exc:
            self._logger.error("Failed to update users on %s: %s", field, exc.message)
            return ServiceResult(
                success=False,
                error=f"Could not save user changes: {exc.message}",
                status_code=500,
            )

        known = set(self._store.all_fields())
        log_audit_event(
            logger=self._logger,
            action="UPDATE_USER",
            entity_type="User",
            entity_id=audit_id,
            details={
                "match_field": field,
                "fields": ",".join(key for key in data if key in known),
            },
        )
        return ServiceResult(success=True, data={"message": "User data updated."})

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _audit_id(self, value: str) -> str:
        """*value* when every record holding it shows it in a visible,
        non-credential field; otherwise the redaction marker.

        Matching ignores the caller's field name, so the name alone cannot
        tell whether a lookup value is a secret.
        """
        schema = self._store.schema
        secret = set(schema.credential_fields())
        shown = [name for name in schema.visible_fields() if name not in secret]

        matched = [record for record in self._store.get_all() if value in record.values()]
        if not matched:
            return _REDACTED
        for record in matched:
            if any(record.get(name) == value for name in secret):
                return _REDACTED
            if not any(record.get(name) == value for name in shown):
                return _REDACTED
        return value
