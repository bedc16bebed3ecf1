"""
Structured JSON Logging Module.

Every store component receives a :class:`StructuredLogger` through its
constructor.  Records are written as one JSON object per line to stdout and
to a rotating log file; load/persist events and the ``AUDIT:`` trail of
user mutations share that format.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO, Union

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
)


class JSONFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger_name, message,
    plus ``extra`` (stringified caller fields) and ``exception`` when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Union[str, dict[str, str]]] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        extra = {
            key: str(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        }
        if extra:
            entry["extra"] = extra

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False)


def _resolve_level(level: Optional[int], level_name: str) -> int:
    if level is not None:
        return level
    resolved = logging.getLevelName(level_name.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _rotating_file_handler(
    log_file: str, max_bytes: int, backup_count: int,
) -> RotatingFileHandler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )


class StructuredLogger:
    """Injectable wrapper around a named ``logging.Logger``.

    Arguments left as ``None`` fall back to ``AppConfig`` (``LOG_LEVEL``,
    ``LOG_FILE``, ``LOG_MAX_BYTES``, ``LOG_BACKUP_COUNT``).  Handlers are
    attached only the first time a name is used, so building several
    wrappers for one name does not duplicate output.
    """

    def __init__(
        self,
        name: str = "userstore",
        level: Optional[int] = None,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        # Imported here: config logs through the standard logging module
        # and must not depend on this one at import time.
        from userstore.config import get_config
        cfg = get_config()

        resolved_level = _resolve_level(level, cfg.LOG_LEVEL)
        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(resolved_level)
        if self._logger.handlers:
            return

        formatter = JSONFormatter()
        self._attach(logging.StreamHandler(stream or sys.stdout), resolved_level, formatter)

        target: str = log_file or cfg.LOG_FILE
        try:
            file_handler = _rotating_file_handler(
                target,
                max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES,
                backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT,
            )
        except OSError as exc:
            self._logger.warning(
                "Could not open log file '%s' (%s); logging to console only.",
                target,
                exc,
            )
            return
        self._attach(file_handler, resolved_level, formatter)

    def _attach(
        self, handler: logging.Handler, level: int, formatter: logging.Formatter,
    ) -> None:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        self._logger.addHandler(handler)

    @property
    def logger(self) -> logging.Logger:
        """The underlying ``logging.Logger``."""
        return self._logger

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.error(msg, *args, **kwargs)


def get_logger(name: str = "userstore") -> StructuredLogger:
    """``StructuredLogger`` for *name* with every setting taken from config."""
    return StructuredLogger(name=name)
