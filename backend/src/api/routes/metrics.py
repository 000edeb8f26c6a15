"""Prometheus metrics endpoint."""

from __future__ import annotations

import hmac

from fastapi import APIRouter, Header, HTTPException, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from src.core.config import get_settings

router = APIRouter()


def _bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


@router.get(
    "/metrics",
    include_in_schema=False,
    summary="Prometheus metrics",
)
async def metrics_endpoint(
    authorization: str | None = Header(default=None),
    x_metrics_token: str | None = Header(default=None, alias="X-Metrics-Token"),
) -> Response:
    """Request and attachment upload metrics.

    Open outside production. In production the scrape must present
    ``METRICS_TOKEN``; without one configured the endpoint does not exist.
    """
    settings = get_settings()
    if settings.environment == "production":
        if not settings.metrics_token:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
        presented = _bearer(authorization) or x_metrics_token
        if not presented or not hmac.compare_digest(presented, settings.metrics_token):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
