"""
Shared Enumerations for the user store.

StrEnum values compare equal to their string equivalents, so
``KeyRole.PASSWORD == "passwordKey"`` holds and roles can be used as
plain mapping keys.
"""

from __future__ import annotations
from enum import StrEnum


class KeyRole(StrEnum):
    """Logical credential slots on a user record.

    The set is closed.  Each role is mapped to a physical field name by
    the schema, so a physical column can be renamed without touching the
    store logic.
    """

    USERNAME = "usernameKey"
    PASSWORD = "passwordKey"
    REMEMBER_TOKEN = "rememberTokenKey"
    RESET_TOKEN = "resetTokenKey"
    ACCESS_TOKEN = "accessTokenKey"
    REFRESH_TOKEN = "refreshTokenKey"


class BackendKind(StrEnum):
    """Persisted source formats supported by ``create_backend``."""

    FILE = "file"
    SQLITE = "sqlite"
