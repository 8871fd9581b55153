"""Process-wide logging setup with text and JSON output formats.

Log messages are dotted event names (``priority.recalc.entity_failed``).
Structured context travels in ``extra=`` and is rendered as ``key=value``
pairs in text mode or as top-level fields in JSON mode.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import UTC, datetime
from typing import Any

from crm_backend.core.config import settings

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)),
) | {"message", "asctime"}
_configured = False


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
    }


class KeyValueFormatter(logging.Formatter):
    """Plain-text formatter that appends `extra` context as sorted key=value pairs."""

    def formatMessage(self, record: logging.LogRecord) -> str:  # noqa: N802
        message = super().formatMessage(record)
        extras = _record_extras(record)
        if not extras:
            return message
        context = " ".join(f"{key}={value}" for key, value in sorted(extras.items()))
        return f"{message} {context}"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with `extra` context merged in as fields."""

    def __init__(self, *, use_utc: bool = False) -> None:
        super().__init__()
        self._use_utc = use_utc

    def _timestamp(self, record: logging.LogRecord) -> str:
        if self._use_utc:
            return datetime.fromtimestamp(record.created, tz=UTC).isoformat()
        return datetime.fromtimestamp(record.created).astimezone().isoformat()

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self._timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_record_extras(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def build_formatter(log_format: str, *, use_utc: bool) -> logging.Formatter:
    """Return the formatter for the configured output format."""
    if log_format == "json":
        return JsonFormatter(use_utc=use_utc)
    formatter = KeyValueFormatter(_TEXT_FORMAT)
    if use_utc:
        formatter.converter = time.gmtime
    return formatter


def configure_logging(
    *,
    level: str | None = None,
    log_format: str | None = None,
    use_utc: bool | None = None,
    force: bool = False,
) -> None:
    """Install a single stdout handler on the root logger (idempotent unless forced)."""
    global _configured
    if _configured and not force:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        build_formatter(
            log_format or settings.log_format,
            use_utc=settings.log_use_utc if use_utc is None else use_utc,
        ),
    )
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel((level or settings.log_level).upper())
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; configuration happens once in `configure_logging`."""
    return logging.getLogger(name)
