"""Prometheus metrics for native resource usage and indexing throughput."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


NATIVE_HANDLES_ACQUIRED = Counter(
    "xapian_native_handles_acquired_total",
    "Native handles wrapped by the binding layer",
    ["kind"],
)

NATIVE_HANDLES_RELEASED = Counter(
    "xapian_native_handles_released_total",
    "Native handles released by the binding layer",
    ["kind"],
)

NATIVE_CALL_LATENCY = Histogram(
    "xapian_native_call_latency_seconds",
    "Latency of native engine operations",
    ["operation"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0),
)

TEXTS_INDEXED = Counter(
    "xapian_texts_indexed_total",
    "Texts submitted to the term generator",
    ["stemmer"],
)

DOCUMENTS_ADDED = Counter(
    "xapian_documents_added_total",
    "Documents handed to a writable database",
)

DECODE_FAILURES = Counter(
    "xapian_codec_decode_failures_total",
    "Escaped payloads that failed to decode",
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get content type for a metrics endpoint."""
    return CONTENT_TYPE_LATEST
