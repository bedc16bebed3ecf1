"""
User Record Schema.

Static description of which fields exist on a user record:

- **profile fields** -- descriptive, non-secret attributes.
- **key roles** -- a fixed table mapping each :class:`KeyRole` to the
  physical field that stores it (password, tokens, ...).
- **visible fields** -- the subset that may be shown outside the store.

``all_fields()`` (profile fields followed by the key-role fields, without
duplicates) is the exact key set of every persisted record.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from userstore.models.enums import KeyRole

__all__ = ["DEFAULT_SCHEMA", "UserSchema"]


class UserSchema(BaseModel):
    """Immutable field layout shared by every record in a store.

    Construction fails (``pydantic.ValidationError``) when a key role is
    left unmapped or a visible field is not part of the record.
    """

    model_config = ConfigDict(frozen=True)

    profile_fields: tuple[str, ...]
    key_fields: Mapping[KeyRole, str]
    visible: tuple[str, ...] = Field(default=())

    @field_validator("key_fields", mode="after")
    @classmethod
    def _freeze_key_fields(cls, value: Mapping[KeyRole, str]) -> Mapping[KeyRole, str]:
        return MappingProxyType(dict(value))

    @model_validator(mode="after")
    def _check_layout(self) -> "UserSchema":
        missing = [role.value for role in KeyRole if role not in self.key_fields]
        if missing:
            raise ValueError(f"Unmapped key roles: {', '.join(missing)}")

        known = set(self.all_fields())
        unknown = [name for name in self.visible if name not in known]
        if unknown:
            raise ValueError(f"Visible fields not in schema: {', '.join(unknown)}")
        return self

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def all_fields(self) -> tuple[str, ...]:
        """Profile fields then key-role fields, first occurrence wins."""
        ordered: dict[str, None] = dict.fromkeys(self.profile_fields)
        for role in KeyRole:
            ordered.setdefault(self.key_fields[role], None)
        return tuple(ordered)

    def visible_fields(self) -> tuple[str, ...]:
        return self.visible

    def key_roles(self) -> dict[KeyRole, str]:
        """Copy of the role -> physical field table, in role order."""
        return {role: self.key_fields[role] for role in KeyRole}

    def key_field(self, role: KeyRole) -> str:
        return self.key_fields[KeyRole(role)]

    def credential_fields(self) -> tuple[str, ...]:
        """Key-role fields that are not also profile fields."""
        return tuple(
            name for name in self.all_fields() if name not in self.profile_fields
        )

    def visible_view(self, record: Mapping[str, str]) -> dict[str, str]:
        """Restrict *record* to the visible fields, in schema order."""
        return {name: record.get(name, "") for name in self.visible}


DEFAULT_SCHEMA: UserSchema = UserSchema(
    profile_fields=("username", "firstname", "lastname", "role"),
    key_fields={
        KeyRole.USERNAME: "username",
        KeyRole.PASSWORD: "password",
        KeyRole.REMEMBER_TOKEN: "remember_token",
        KeyRole.RESET_TOKEN: "reset_token",
        KeyRole.ACCESS_TOKEN: "access_token",
        KeyRole.REFRESH_TOKEN: "refresh_token",
    },
    visible=("username", "firstname", "lastname", "role"),
)
