"""
Flat-File Literal Backend.

The persisted source is a text file holding one Python literal: a dict
mapping 1-based positions to user records, e.g.::

    {1: {'username': 'alice', 'firstname': 'Alice', ..., 'refresh_token': ''},
     2: {'username': 'bob', ...}}

Reads go through ``ast.literal_eval`` so the file can never execute code.
Writes replace the whole file with ``pprint.pformat`` output.  There is no
locking and no temp-file-and-rename: two processes writing the same file
race, and the last writer wins.
"""

from __future__ import annotations

import ast
import pprint
from pathlib import Path
from typing import Optional

from userstore.exceptions import PersistTargetMissingError, StoreError
from userstore.logger import StructuredLogger
from userstore.models.user import UserCollection
from userstore.storage.base import StorageBackend


class LiteralFileBackend(StorageBackend):
    """Loads and rewrites a single-literal user file.

    Parameters
    ----------
    path:
        Location of the persisted source.  It must already exist before
        the first save; loading a missing file yields no data.
    logger:
        Structured logger instance.
    """

    def __init__(self, path: Path, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._path: Path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    def load(self) -> Optional[object]:
        if not self._path.is_file():
            self._logger.info("No persisted source at %s.", self._path)
            return None

        try:
            text: str = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self._logger.warning(
                "Could not read persisted source %s: %s", self._path, exc,
            )
            return None

        if not text.strip():
            return None

        try:
            return ast.literal_eval(text.strip())
        except (SyntaxError, ValueError, TypeError, MemoryError, RecursionError) as exc:
            self._logger.warning(
                "Persisted source %s does not parse (%s); treating as empty.",
                self._path,
                exc,
            )
            return None

    def save(self, collection: UserCollection) -> None:
        if not self._path.is_file():
            self._logger.error("Persisted source not found: %s", self._path)
            raise PersistTargetMissingError(self._path)

        content: str = pprint.pformat(collection, sort_dicts=False) + "\n"
        try:
            self._path.write_text(content, encoding="utf-8")
        except OSError as exc:
            self._logger.error("Could not write %s: %s", self._path, exc)
            raise StoreError(
                f"Could not write users to {self._path}: {exc}", original_error=exc,
            ) from exc
        self._logger.debug(
            "Persisted %d user(s) to %s.", len(collection), self._path,
        )
