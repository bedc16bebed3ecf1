"""
Business Logic Services Package.

The ``create_services()`` factory builds the storage backend, the single
``UserStore`` for the process and the services that consume it, returning
a typed dict the application layer can use without knowing the internal
dependency graph.
"""

from __future__ import annotations

from typing import Optional, TypedDict

from userstore.config import AppConfig
from userstore.logger import StructuredLogger, get_logger
from userstore.models.schema import DEFAULT_SCHEMA, UserSchema
from userstore.repositories.user_repository import UserStore
from userstore.services.users import UserService
from userstore.storage import StorageBackend, create_backend


class ServiceContainer(TypedDict):
    """Typed container for the wired store and services."""

    backend: StorageBackend
    user_store: UserStore
    user_service: UserService


def create_services(
    config: AppConfig,
    logger: Optional[StructuredLogger] = None,
    schema: UserSchema = DEFAULT_SCHEMA,
) -> ServiceContainer:
    """
    Wire the backend, store and services together.

    This is the single composition root.  Call it once per process and
    pass the returned store/services by reference; building a second
    store over the same persisted source gives it its own in-memory copy.

    Args:
        config: Application configuration selecting the backend.
        logger: Optional logger shared by every component.
        schema: Field layout of the records.

    Returns:
        ServiceContainer mapping component names to wired instances.
    """
    logger = logger or get_logger("services")

    backend = create_backend(config, logger)
    user_store = UserStore(backend=backend, logger=logger, schema=schema)
    user_service = UserService(store=user_store, logger=logger)

    return ServiceContainer(
        backend=backend,
        user_store=user_store,
        user_service=user_service,
    )
