"""Structured JSON logging for mdbridge.

Log records are emitted as single-line JSON objects::

    {"ts": "2026-10-19T12:00:00.123456+00:00", "level": "WARNING",
     "logger": "mdbridge.parser", "message": "tokenizer raised",
     "op": "tokenize", "extension": "callout"}

Structured fields travel in ``extra={"extra_fields": {...}}``; the
:func:`fields` helper builds that mapping::

    from mdbridge.observability import fields, get_logger

    log = get_logger("mdbridge.sync")
    log.debug("export armed", extra=fields(op="handle_update", delay_ms=300))
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER_NAME = "mdbridge"


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Guaranteed keys are ``ts`` (ISO-8601 UTC), ``level``, ``logger`` and
    ``message``.  Caller-supplied ``extra_fields`` are merged at the top
    level; ``exception`` and ``stack_info`` appear only when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(record, "extra_fields", None)
        if extra_fields:
            entry.update(extra_fields)

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)


def fields(**kwargs: Any) -> dict[str, dict[str, Any]]:
    """Build the ``extra`` mapping for a structured log call."""
    return {"extra_fields": kwargs}


# One handler per configured root so repeated ``get_logger`` calls from
# many modules never duplicate output.
_configured_roots: set[str] = set()


def get_logger(
    name: str = ROOT_LOGGER_NAME,
    *,
    level: int | str = logging.WARNING,
    stream: Any | None = None,
) -> logging.Logger:
    """Get a logger whose records are rendered by :class:`StructuredFormatter`.

    The JSON handler is installed once on the top-level component of
    *name* (``"mdbridge"`` for ``"mdbridge.sync"``), so child loggers share
    it through normal propagation.

    Parameters
    ----------
    name:
        Logger name.  Defaults to ``"mdbridge"``.
    level:
        Level applied to the root logger the first time it is configured.
        Accepts an ``int`` or a case-insensitive level name.
    stream:
        Output stream for the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        The logger for *name*.
    """
    root_name = name.split(".", 1)[0]
    root = logging.getLogger(root_name)

    if root_name not in _configured_roots:
        resolved_level = (
            logging.getLevelName(level.upper()) if isinstance(level, str) else level
        )
        root.setLevel(resolved_level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        root.addHandler(handler)
        root.propagate = False

        _configured_roots.add(root_name)

    return logging.getLogger(name)
