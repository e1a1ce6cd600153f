"""Structured logging helpers for the Closet Stylist app.

Every record is rendered as one JSON object carrying the event name, the
request correlation id and any extra fields passed to ``log_event``. Extra
fields go through ``redact_for_log`` first so user identity and image
payloads never reach the log stream.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import re
import sys
import time
import uuid
from typing import IO, Any, Dict, Iterator, Optional

SERVICE_NAME = "closet-stylist"
CORRELATION_ID: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)

_RESERVED_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "taskName"}
_REDACTED_KEYS = frozenset(
    {"user_id", "email", "display_name", "photo_url", "data", "image", "image_data_url"}
)
_MAX_LOGGED_STRING = 512
_EMAIL_PATTERN = re.compile(r"[\w.\-]+@[\w.\-]+")
_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JsonFormatter(logging.Formatter):
    """Render a log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = record.getMessage()
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "event": getattr(record, "event", message),
            "message": message,
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_ATTRS and key not in payload
        }
        payload.update(redact_for_log(extras))
        return json.dumps(payload, default=str)


def configure_logging(level: int | str | None = None, stream: IO[str] | None = None) -> None:
    """Install a single root handler.

    ``LOG_LEVEL`` sets the level when ``level`` is omitted and ``LOG_FORMAT=text``
    switches to plain text for local debugging.
    """

    handler = logging.StreamHandler(stream or sys.stderr)
    if os.getenv("LOG_FORMAT", "json").lower() == "text":
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    else:
        handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level or os.getenv("LOG_LEVEL", "INFO"), handlers=[handler], force=True)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring the root logger on first use."""

    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def _scrub_string(value: str) -> str:
    if value.startswith("data:"):
        return "[redacted-data-url]"
    if value.lower().startswith(("http://", "https://")):
        return "[redacted-url]"
    value = _EMAIL_PATTERN.sub("[redacted-email]", value)
    if len(value) > _MAX_LOGGED_STRING:
        return f"[truncated len={len(value)}]"
    return value


def redact_for_log(payload: Any) -> Any:
    """Recursively scrub identity fields, emails, URLs and image bytes."""

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _scrub_string(payload)
    if isinstance(payload, (bytes, bytearray)):
        return f"[bytes len={len(payload)}]"
    if isinstance(payload, dict):
        return {
            key: "[redacted]" if key in _REDACTED_KEYS else redact_for_log(value)
            for key, value in payload.items()
        }
    if isinstance(payload, (list, tuple, set, frozenset)):
        return [redact_for_log(item) for item in payload]
    return _scrub_string(str(payload))


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Adopt ``correlation_id``, or keep the current one, or mint a new one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    minted = uuid.uuid4().hex
    CORRELATION_ID.set(minted)
    return minted


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block."""

    token = CORRELATION_ID.set(correlation_id or CORRELATION_ID.get() or uuid.uuid4().hex)
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Emit ``event`` with redacted ``fields`` and the active correlation id."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    extra = {key: value for key, value in fields.items() if key not in _RESERVED_RECORD_ATTRS}
    extra.update(event=event, correlation_id=correlation_id)
    logger.log(level, event, exc_info=exc_info, extra=extra)


@contextlib.contextmanager
def operation_context(name: str, correlation_id: str | None = None) -> Iterator[str]:
    """Scope a correlation id around one named operation and time it."""

    logger = logging.getLogger(__name__)
    start = time.perf_counter()
    with correlation_context(correlation_id) as scoped_id:
        logger.debug("operation started", extra={"event": "operation_started", "operation": name})
        try:
            yield scoped_id
        finally:
            logger.debug(
                "operation finished",
                extra={
                    "event": "operation_finished",
                    "operation": name,
                    "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                },
            )


__all__ = [
    "CORRELATION_ID",
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "redact_for_log",
]
