"""
Repository Layer Package.

Data access over the persisted user collection.  Services never touch a
storage backend directly; they go through ``UserStore``.

Usage:
    from userstore.repositories import UserStore
"""

from userstore.repositories.user_repository import UserStore

__all__ = [
    "UserStore",
]
