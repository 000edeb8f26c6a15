"""Integration tests for the Prometheus metrics endpoint."""

import io

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_metrics_endpoint_returns_prometheus_metrics(client: AsyncClient):
    # Touch at least one endpoint so counters/histograms have samples.
    health = await client.get("/api/health")
    assert health.status_code == 200

    response = await client.get("/api/metrics")
    assert response.status_code == 200
    body = response.text

    assert "siteops_http_requests_total" in body
    assert "siteops_http_request_duration_seconds" in body


@pytest.mark.asyncio
async def test_upload_outcomes_are_counted(client: AsyncClient):
    await client.post(
        "/api/files/upload",
        files={"file": ("ok.txt", io.BytesIO(b"ok"), "text/plain")},
    )
    await client.post(
        "/api/files/upload",
        files={"file": ("no.exe", io.BytesIO(b"MZ"), "application/x-msdownload")},
    )

    body = (await client.get("/api/metrics")).text

    assert 'siteops_attachment_uploads_total{outcome="stored"}' in body
    assert 'siteops_attachment_uploads_total{outcome="rejected"}' in body
    assert "siteops_attachment_upload_bytes" in body
