"""File-backed store for user identity records."""

__version__ = "1.0.0"
