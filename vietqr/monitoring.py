"""Prometheus metrics for the HTTP service."""
from __future__ import annotations

from typing import Final

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

_HTTP_REQUEST_TOTAL: Final = Counter(
    "vietqr_http_requests_total",
    "Total HTTP requests",
    labelnames=("method", "route", "status"),
)
_HTTP_REQUEST_LATENCY: Final = Histogram(
    "vietqr_http_request_duration_seconds",
    "Latency of HTTP requests",
    labelnames=("method", "route"),
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1, 2),
)
_SERVICE_ERRORS_TOTAL: Final = Counter(
    "vietqr_service_errors_total",
    "Errors returned to clients by code",
    labelnames=("code", "route"),
)
_PAYLOADS_GENERATED_TOTAL: Final = Counter(
    "vietqr_payloads_generated_total",
    "Payloads generated by initiation method",
    labelnames=("variant",),
)
_DECODE_FAILURES_TOTAL: Final = Counter(
    "vietqr_decode_failures_total",
    "Payloads or images that could not be decoded",
    labelnames=("kind",),
)
_VALIDATIONS_TOTAL: Final = Counter(
    "vietqr_validations_total",
    "Post-parse validation outcomes",
    labelnames=("outcome",),
)


def observe_request(method: str, route: str, status_code: int, duration_ms: float) -> None:
    _HTTP_REQUEST_TOTAL.labels(method=method, route=route, status=str(status_code)).inc()
    _HTTP_REQUEST_LATENCY.labels(method=method, route=route).observe(duration_ms / 1000)


def record_service_error(code: str, route: str) -> None:
    _SERVICE_ERRORS_TOTAL.labels(code=code, route=route).inc()


def record_generated(variant: str) -> None:
    _PAYLOADS_GENERATED_TOTAL.labels(variant=variant).inc()


def record_decode_failure(kind: str) -> None:
    _DECODE_FAILURES_TOTAL.labels(kind=kind).inc()


def record_validation(valid: bool, corrupted: bool) -> None:
    if corrupted:
        outcome = "corrupted"
    else:
        outcome = "valid" if valid else "invalid"
    _VALIDATIONS_TOTAL.labels(outcome=outcome).inc()


def metrics_payload() -> tuple[bytes, str]:
    """Return Prometheus exposition payload and content type."""

    return generate_latest(), CONTENT_TYPE_LATEST
