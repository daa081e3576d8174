"""Metrics endpoint for Prometheus scraping.

Enabled when ``METRICS_BACKEND`` is ``registry``/``prometheus`` or when
``METRICS_ENABLED=true``; otherwise ``GET /metrics`` answers 404.
"""

from __future__ import annotations

import os

from fastapi import APIRouter, Response
from fastapi.responses import PlainTextResponse

from observability.metrics import RegistryMetricsClient, get_metrics_client

router = APIRouter()

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def _is_metrics_enabled() -> bool:
    explicit = os.getenv("METRICS_ENABLED", "").lower()
    if explicit in ("true", "1", "yes"):
        return True
    if explicit in ("false", "0", "no"):
        return False
    return os.getenv("METRICS_BACKEND", "null").lower() in ("registry", "prometheus")


@router.get("/metrics", response_class=PlainTextResponse, include_in_schema=False)
def get_metrics() -> Response:
    if not _is_metrics_enabled():
        return PlainTextResponse(
            content="# Metrics endpoint disabled. Set METRICS_BACKEND=prometheus to enable.\n",
            status_code=404,
        )

    client = get_metrics_client()
    if isinstance(client, RegistryMetricsClient):
        return Response(content=client.export_prometheus(), media_type=PROMETHEUS_CONTENT_TYPE)

    return PlainTextResponse(
        content=(
            "# Metrics collection is not using the registry backend.\n"
            f"# Current backend: {type(client).__name__}\n"
        ),
    )


__all__ = ["router"]
