"""
User Store Entry Point.

Bootstraps the dependency graph via constructor injection, loads the
persisted user collection once and reports what the store holds.  Every
component is wired here; there is no module-level store.

Usage::

    python main.py
"""

from __future__ import annotations

import sys

from userstore.config import get_config
from userstore.exceptions import StoreError
from userstore.logger import StructuredLogger, get_logger
from userstore.services import create_services


def main() -> int:
    """Wire dependencies, load the store and log a visible-field summary."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting user store...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Backend + store + services (single composition root)
    # ------------------------------------------------------------------
    services = create_services(config=config, logger=get_logger("services"))
    store = services["user_store"]
    try:
        store.initialize()

        # ------------------------------------------------------------------
        # 3. Report (visible fields only)
        # ------------------------------------------------------------------
        result = services["user_service"].get_all_users()
        logger.info(
            "Store ready: %d user(s), visible fields: %s, key roles: %s.",
            len(result.data or []),
            ", ".join(store.visible_fields()),
            ", ".join(f"{role}={name}" for role, name in store.key_roles().items()),
        )
        for profile in result.data or []:
            logger.info("User: %s", profile)
    finally:
        services["backend"].close()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pass
    except StoreError as exc:
        sys.stderr.write(f"FATAL: {exc.message}\n")
        sys.exit(1)
