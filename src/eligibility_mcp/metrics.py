"""Prometheus metrics for eligibility evaluations."""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

REQUESTS_TOTAL = Counter(
    "eligibility_requests_total",
    "Total number of unpaid leave eligibility evaluation requests",
)
ERRORS_TOTAL = Counter(
    "eligibility_errors_total",
    "Total number of errors in unpaid leave eligibility evaluations",
)
REQUEST_DURATION = Histogram(
    "eligibility_request_duration_seconds",
    "Duration of unpaid leave eligibility evaluation requests in seconds",
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0),
)
ACTIVE_REQUESTS = Gauge(
    "eligibility_active_requests",
    "Number of active unpaid leave eligibility evaluation requests",
)


@contextmanager
def track_request() -> Iterator[None]:
    """Count one evaluation, time it, and count it as an error if it raises."""
    REQUESTS_TOTAL.inc()
    ACTIVE_REQUESTS.inc()
    start = time.perf_counter()
    try:
        yield
    except Exception:
        ERRORS_TOTAL.inc()
        raise
    finally:
        REQUEST_DURATION.observe(time.perf_counter() - start)
        ACTIVE_REQUESTS.dec()


def record_error() -> None:
    ERRORS_TOTAL.inc()


def render_latest() -> tuple[bytes, str]:
    """Return the exposition payload and its content type."""
    return generate_latest(), CONTENT_TYPE_LATEST
