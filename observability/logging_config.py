"""JSON logging for the shift-report service.

Each record is one JSON object on stderr. Structured fields are passed via
``extra`` through ``StructuredLogger``; fields whose name looks like a
credential are replaced before they reach the handler.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Mapping, MutableMapping

SERVICE_NAME = "shift_report"
REDACTED = "<redacted>"

_SENSITIVE_KEYS = ("password", "passwd", "secret", "token", "authorization", "smtp_pass")
_PLAIN_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _redact(fields: Mapping[str, Any]) -> dict[str, Any]:
    return {
        key: REDACTED if any(marker in key.lower() for marker in _SENSITIVE_KEYS) else value
        for key, value in fields.items()
    }


class StructuredFormatter(logging.Formatter):
    """Render a record, plus its ``extra_fields``, as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_redact(getattr(record, "extra_fields", None) or {}))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class StructuredLogger(logging.LoggerAdapter[logging.Logger]):
    """Adapter whose default fields are overridden by per-call ``extra``."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        fields = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        kwargs["extra"] = {"extra_fields": fields}
        return msg, kwargs


_configured = False


def _env_level(default: int) -> int:
    name = os.getenv("LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def configure_logging(level: int = logging.INFO, structured: bool | None = None) -> None:
    """Install the stderr handler on the root logger, once per process.

    ``LOG_LEVEL`` overrides ``level``. ``LOG_FORMAT=plain`` selects a
    human-readable line format for local runs.
    """
    global _configured
    if _configured:
        return

    if structured is None:
        structured = os.getenv("LOG_FORMAT", "json").strip().lower() != "plain"

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter() if structured else logging.Formatter(_PLAIN_FORMAT))

    root = logging.getLogger()
    root.setLevel(_env_level(level))
    root.addHandler(handler)
    _configured = True


def get_logger(name: str, **defaults: Any) -> StructuredLogger:
    """Module logger carrying ``defaults`` on every record."""
    configure_logging()
    return StructuredLogger(logging.getLogger(name), defaults)
