"""Prometheus metrics helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

HTTP_REQUESTS_TOTAL = Counter(
    "siteops_http_requests_total",
    "Total number of HTTP requests.",
    ["method", "route", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "siteops_http_request_duration_seconds",
    "HTTP request duration in seconds.",
    ["method", "route", "status"],
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
    ),
)

ATTACHMENT_UPLOADS_TOTAL = Counter(
    "siteops_attachment_uploads_total",
    "Attachment upload attempts per file.",
    ["outcome"],
)

ATTACHMENT_UPLOAD_BYTES = Histogram(
    "siteops_attachment_upload_bytes",
    "Size of stored attachments in bytes.",
    buckets=(
        1024,
        16 * 1024,
        128 * 1024,
        512 * 1024,
        1024 * 1024,
        2 * 1024 * 1024,
        5 * 1024 * 1024,
        10 * 1024 * 1024,
    ),
)


def observe_http_request(
    *,
    method: str,
    route: str,
    status_code: int,
    duration_ms: float,
) -> None:
    status = str(status_code)
    HTTP_REQUESTS_TOTAL.labels(method=method, route=route, status=status).inc()
    HTTP_REQUEST_DURATION_SECONDS.labels(
        method=method, route=route, status=status
    ).observe(duration_ms / 1000.0)


def observe_attachment_upload(*, outcome: str, size_bytes: int | None = None) -> None:
    """Record one per-file upload outcome ("stored", "rejected" or "failed")."""
    ATTACHMENT_UPLOADS_TOTAL.labels(outcome=outcome).inc()
    if size_bytes is not None:
        ATTACHMENT_UPLOAD_BYTES.observe(size_bytes)
