"""Prometheus exposition of the catalog's request and tour counters."""

from fastapi import APIRouter, Response

from ..core.observability import get_prometheus_metrics

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

router = APIRouter(tags=["Observability"])


@router.get("/metrics", response_class=Response, summary="Prometheus Metrics")
async def metrics() -> Response:
    """Request, tour write, validation failure and unresolved reference counters."""
    return Response(content=get_prometheus_metrics(), media_type=PROMETHEUS_CONTENT_TYPE)
