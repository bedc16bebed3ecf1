"""
Shared pytest fixtures for the user store test suite.

Every test gets its own persisted source under ``tmp_path`` and its own
logger name, so handler state never leaks between tests.
"""

import pprint
from pathlib import Path
from typing import Callable

import pytest

from userstore.config import reset_config
from userstore.logger import StructuredLogger
from userstore.repositories.user_repository import UserStore
from userstore.storage.literal_file import LiteralFileBackend


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config-driven defaults at the temp dir and reset the singleton."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "logs" / "userstore.log"))
    monkeypatch.setenv("USERS_REPOSITORY_PATH", str(tmp_path / "users.repo"))
    monkeypatch.delenv("STORAGE_BACKEND", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def logger(request, tmp_path) -> StructuredLogger:
    return StructuredLogger(
        name=f"test.{request.node.name}",
        log_file=str(tmp_path / "logs" / "test.log"),
    )


@pytest.fixture
def repo_path(tmp_path) -> Path:
    """An existing, empty persisted source."""
    path = tmp_path / "users.repo"
    path.write_text("", encoding="utf-8")
    return path


@pytest.fixture
def write_users(repo_path) -> Callable[[dict], Path]:
    """Write a collection literal into the persisted source."""

    def _write(collection: dict) -> Path:
        repo_path.write_text(pprint.pformat(collection, sort_dicts=False), encoding="utf-8")
        return repo_path

    return _write


@pytest.fixture
def make_store(logger) -> Callable[[Path], UserStore]:
    def _make(path: Path) -> UserStore:
        return UserStore(backend=LiteralFileBackend(path=path, logger=logger), logger=logger)

    return _make


@pytest.fixture
def alice_bob(write_users):
    """Two-user collection written to disk."""
    return write_users({
        1: {"username": "alice", "role": "editor"},
        2: {"username": "bob", "role": "admin"},
    })
