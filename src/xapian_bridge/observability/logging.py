"""Structured JSON logging for the binding layer.

Records carry the active OpenTelemetry trace and span ids. Binding-layer
errors attached to a record (``exc_info``) contribute their structured fields,
and binary extras are rendered as bounded text previews since value payloads
may hold NUL bytes or arbitrary binary data.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import IO, Any

from opentelemetry import trace
import orjson

from xapian_bridge.errors import DecodeError, LibraryLoadError, NativeConstructionError, NativeOperationError


_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__.keys() | {"message", "asctime"}
)
_PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def current_trace_ids() -> dict[str, str]:
    """Return the trace and span ids of the active span, empty strings when none."""
    ctx = trace.get_current_span().get_span_context()
    if not ctx.is_valid:
        return {"trace_id": "", "span_id": ""}
    return {
        "trace_id": format(ctx.trace_id, "032x"),
        "span_id": format(ctx.span_id, "016x"),
    }


def _error_fields(exc: BaseException | None) -> dict[str, Any]:
    if isinstance(exc, NativeConstructionError):
        return {"native_kind": exc.kind, "native_path": exc.path, "native_message": exc.message}
    if isinstance(exc, NativeOperationError):
        return {"native_operation": exc.operation, "native_path": exc.path, "native_message": exc.message}
    if isinstance(exc, DecodeError):
        return {"decode_offset": exc.offset}
    if isinstance(exc, LibraryLoadError):
        return {"library_path": exc.path}
    return {}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, serialized with orjson."""

    REDACT_KEYS = frozenset({"password", "token", "api_key", "secret", "authorization"})
    MAX_MESSAGE_LEN = 2000
    MAX_EXTRA_LEN = 500
    BYTES_PREVIEW_LEN = 256

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if len(message) > self.MAX_MESSAGE_LEN:
            message = message[: self.MAX_MESSAGE_LEN] + "..."

        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": message,
            "logger": record.name,
            **current_trace_ids(),
        }
        if "." in record.name:
            entry["component"] = record.name.rsplit(".", 1)[-1]

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
            entry.update(_error_fields(record.exc_info[1]))

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            if key.lower() in self.REDACT_KEYS:
                entry[key] = "[REDACTED]"
            elif isinstance(value, str) and len(value) > self.MAX_EXTRA_LEN:
                entry[key] = value[: self.MAX_EXTRA_LEN] + "..."
            else:
                entry[key] = value

        return orjson.dumps(entry, default=self._fallback).decode("utf-8")

    def _fallback(self, value: Any) -> Any:
        if isinstance(value, (bytes, bytearray, memoryview)):
            data = bytes(value)
            preview = data[: self.BYTES_PREVIEW_LEN].decode("utf-8", errors="backslashreplace")
            return preview + "..." if len(data) > self.BYTES_PREVIEW_LEN else preview
        if isinstance(value, Path):
            return str(value)
        if isinstance(value, BaseException):
            return f"{type(value).__name__}: {value}"
        return repr(value)


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Replace the root logger's handlers with a single stream handler.

    Args:
        level: Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Emit structured JSON logs when True
        logger_levels: Per-logger level overrides (logger name -> level string)
        stream: Destination stream, stdout by default
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(_PLAIN_FORMAT))
    root.addHandler(handler)

    for logger_name, logger_level in (logger_levels or {}).items():
        logging.getLogger(logger_name).setLevel(getattr(logging, logger_level.upper(), logging.INFO))


def configure_logging_from_settings(settings: Any = None, *, stream: IO[str] | None = None) -> None:
    """Configure logging from ``Settings.log_level`` and ``Settings.log_json``."""
    if settings is None:
        from xapian_bridge.config import get_settings

        settings = get_settings()
    configure_logging(settings.log_level, settings.log_json, stream=stream)
