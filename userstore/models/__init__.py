"""
Data Models Package.

Re-exports the schema, record types and enumerations:
    from userstore.models import DEFAULT_SCHEMA, UserSchema, KeyRole
"""

from userstore.models.enums import BackendKind, KeyRole
from userstore.models.schema import DEFAULT_SCHEMA, UserSchema
from userstore.models.service_models import ServiceResult
from userstore.models.user import UserCollection, UserRecord

__all__ = [
    "BackendKind",
    "DEFAULT_SCHEMA",
    "KeyRole",
    "ServiceResult",
    "UserCollection",
    "UserRecord",
    "UserSchema",
]
