"""Logging helpers for sqladapter.

Library code logs through :func:`get_logger` and passes its context as
``extra={"extra_fields": {...}}``. :class:`StructuredFormatter` turns those
fields into one JSON object per record.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit, urlunsplit

import msgspec

if TYPE_CHECKING:
    from logging import LogRecord

__all__ = ("StructuredFormatter", "configure_logging", "get_logger", "mask_dsn")

_json_encoder = msgspec.json.Encoder(enc_hook=repr)

_CONNINFO_PASSWORD = re.compile(r"(password\s*=\s*)(\S+)", re.IGNORECASE)

# adapter context, rendered first and in this order
_CONTEXT_FIELDS = ("dsn", "sql", "parameters", "error")


def mask_dsn(dsn: str) -> str:
    """Hide the password in a URL or libpq conninfo style dsn."""
    try:
        parts = urlsplit(dsn)
    except ValueError:
        return dsn
    if parts.password:
        host = parts.netloc.rpartition("@")[2]
        return urlunsplit(parts._replace(netloc=f"{parts.username}:***@{host}"))
    return _CONNINFO_PASSWORD.sub(r"\1***", dsn)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for adapter records.

    The connection, statement and error context of a record come first, any
    other ``extra_fields`` after them. Passwords in ``dsn`` are masked.
    """

    def format(self, record: LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] = dict(getattr(record, "extra_fields", None) or {})
        if "dsn" in extra_fields:
            extra_fields["dsn"] = mask_dsn(str(extra_fields["dsn"]))
        for field in _CONTEXT_FIELDS:
            if field in extra_fields:
                log_entry[field] = extra_fields.pop(field)
        log_entry.update(extra_fields)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return _json_encoder.encode(log_entry).decode("utf-8")


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger under the ``sqladapter`` namespace.

    Args:
        name: Logger name. If not provided, returns the root sqladapter logger.

    Returns:
        The logger.
    """
    if name is None:
        return logging.getLogger("sqladapter")
    if not name.startswith("sqladapter"):
        name = f"sqladapter.{name}"
    return logging.getLogger(name)


def configure_logging(level: str = "INFO", format_style: str = "structured") -> None:
    """Send sqladapter records to stdout.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_style: "structured" for JSON, "simple" for text
    """
    root_logger = logging.getLogger("sqladapter")
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if format_style == "structured":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root_logger.addHandler(handler)
    root_logger.propagate = False
