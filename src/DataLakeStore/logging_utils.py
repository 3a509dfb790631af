"""
Structured Logging Utilities

Helpers shared by the transport and token flows: masking of credential-bearing
fields, a JSON line formatter, and a ``setup_logging`` entry point for
applications that want the ``DataLakeStore`` logger wired to stderr.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional, Union

from .settings import LogLevel, get_settings

ROOT_LOGGER_NAME = "DataLakeStore"

_SENSITIVE_KEYS = {
    "authorization",
    "access_token",
    "refresh_token",
    "client_secret",
    "password",
    "token",
    "secret",
}


def mask_sensitive_data(payload: Mapping[str, object]) -> Dict[str, object]:
    """Remove secrets from structured payloads prior to logging.

    Args:
        payload: Key-value pairs that may contain tokens, client secrets or
            passwords gathered from an OAuth form or request headers.

    Returns:
        Copy of the payload where sensitive fields are replaced with
        ``***masked***``.

    Examples:
        >>> mask_sensitive_data({"client_secret": "s3cr3t", "grant_type": "password"})
        {'client_secret': '***masked***', 'grant_type': 'password'}
    """
    masked: Dict[str, object] = {}
    for key, value in payload.items():
        if key.lower() in _SENSITIVE_KEYS:
            masked[key] = "***masked***"
        elif isinstance(value, str) and value.lower().startswith("bearer "):
            masked[key] = "***masked***"
        else:
            masked[key] = value
    return masked


class JSONFormatter(logging.Formatter):
    """Formatter emitting JSON structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Serialize a logging record into a JSON line with masked secrets."""
        now = datetime.now(timezone.utc)
        log_obj: Dict[str, object] = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "client_request_id": getattr(record, "client_request_id", None),
            "operation": getattr(record, "operation", None),
        }
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_obj.update(extra_fields)
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(mask_sensitive_data(log_obj), default=str)


def setup_logging(
    level: Optional[Union[str, LogLevel]] = None, *, json_lines: bool = False
) -> logging.Logger:
    """Attach a managed stderr handler to the ``DataLakeStore`` logger.

    Calling this repeatedly replaces the previously installed handler rather
    than stacking duplicates.
    """
    if level is None:
        level = get_settings().log_level
    level_name = level.value if isinstance(level, LogLevel) else str(level)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level_name.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_datalakestore_managed", False):
            logger.removeHandler(handler)
            handler.close()

    handler = logging.StreamHandler(sys.stderr)
    if json_lines:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    handler._datalakestore_managed = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger


__all__ = ["JSONFormatter", "ROOT_LOGGER_NAME", "mask_sensitive_data", "setup_logging"]
