"""Observability module for logging, tracing and metrics."""

from xapian_bridge.observability.logging import (
    JsonFormatter,
    configure_logging,
    configure_logging_from_settings,
    current_trace_ids,
)
from xapian_bridge.observability.metrics import (
    DECODE_FAILURES,
    DOCUMENTS_ADDED,
    NATIVE_CALL_LATENCY,
    NATIVE_HANDLES_ACQUIRED,
    NATIVE_HANDLES_RELEASED,
    TEXTS_INDEXED,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from xapian_bridge.observability.tracing import create_span, get_tracer, init_tracing, native_operation


__all__ = [
    "DECODE_FAILURES",
    "DOCUMENTS_ADDED",
    "NATIVE_CALL_LATENCY",
    "NATIVE_HANDLES_ACQUIRED",
    "NATIVE_HANDLES_RELEASED",
    "TEXTS_INDEXED",
    "JsonFormatter",
    "configure_logging",
    "configure_logging_from_settings",
    "create_span",
    "current_trace_ids",
    "get_metrics",
    "get_metrics_content_type",
    "get_tracer",
    "init_tracing",
    "native_operation",
    "track_latency",
]
