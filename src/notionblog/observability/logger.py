"""Structured JSON logging for notionblog.

Each record is written as one JSON object per line::

    {"ts": "2026-01-05T10:00:00.000000+00:00", "level": "WARNING",
     "logger": "notionblog.fetcher", "message": "Child listing failed",
     "op": "fetch_children", "block_id": "abc", "depth": 2}

Structured fields travel on the record as ``extra_fields``; the
:func:`log_event` helper builds that ``extra`` mapping so call sites stay
one line long.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredFormatter(logging.Formatter):
    """Render log records as single-line JSON.

    Guaranteed keys are ``ts`` (UTC ISO-8601), ``level``, ``logger`` and
    ``message``.  Fields from ``record.extra_fields`` are merged at the top
    level; they never overwrite the guaranteed keys.  Exception and stack
    text is attached under ``exception`` and ``stack_info``.
    """

    _RESERVED = frozenset({"ts", "level", "logger", "message"})

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        fields: dict[str, Any] | None = getattr(record, "extra_fields", None)
        if fields:
            for key, value in fields.items():
                if key not in self._RESERVED:
                    entry[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


_configured: set[str] = set()


def get_logger(
    name: str = "notionblog",
    *,
    level: int | str = logging.DEBUG,
    stream: Any | None = None,
) -> logging.Logger:
    """Return a logger with a :class:`StructuredFormatter` handler.

    Parameters
    ----------
    name:
        Logger name.  Defaults to ``"notionblog"``.
    level:
        Level applied the first time *name* is configured; an ``int`` or a
        case-insensitive level name.
    stream:
        Handler stream.  Defaults to ``sys.stderr``.

    Repeated calls with the same *name* return the same logger without
    attaching a second handler.
    """
    logger = logging.getLogger(name)
    if name in _configured:
        return logger

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    _configured.add(name)
    return logger


def log_event(op: str, **fields: Any) -> dict[str, Any]:
    """Build the ``extra`` mapping for a structured log call.

    Usage::

        log.warning("Child listing failed", extra=log_event("fetch_children", block_id=bid))
    """
    return {"extra_fields": {"op": op, **fields}}
