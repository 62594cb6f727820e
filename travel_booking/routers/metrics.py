"""Prometheus scrape endpoint for request and booking counters."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST

from ..core.observability import get_prometheus_metrics

router = APIRouter(tags=["Observability"])


@router.get("/metrics", response_class=Response, summary="Prometheus metrics")
async def metrics() -> Response:
    """Expose request, submission, confirmation and notification-failure series."""
    return Response(content=get_prometheus_metrics(), media_type=CONTENT_TYPE_LATEST)
