"""FastAPI adapter for the metrics endpoint."""

from fastapi import APIRouter, Response

from eureka_exporter.adapters.frameworks.asgi import render_metrics
from eureka_exporter.core.encoding.prometheus import CONTENT_TYPE
from eureka_exporter.core.ports import CollectorPort


def create_metrics_router(*collectors: CollectorPort) -> APIRouter:
    """Create a FastAPI router with a /metrics endpoint.

    Args:
        *collectors: Objects implementing CollectorPort.

    Returns:
        APIRouter with /metrics configured.
    """
    router = APIRouter()

    @router.get("/metrics")
    async def get_metrics() -> Response:
        """Return a fresh scrape in Prometheus text format."""
        body = await render_metrics(collectors)
        return Response(content=body, media_type=CONTENT_TYPE)

    return router
