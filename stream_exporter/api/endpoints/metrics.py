from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from stream_exporter.api.dependencies import get_registry
from stream_exporter.core.config import normalize_metrics_path
from stream_exporter.metrics.registry import MetricsRegistry


def build_router(metrics_path: str) -> APIRouter:
    """Router serving the exposition text at ``metrics_path``."""
    router = APIRouter()

    @router.get(normalize_metrics_path(metrics_path), include_in_schema=False)
    def metrics(registry: MetricsRegistry = Depends(get_registry)):
        return StreamingResponse(
            (line.encode("utf-8") for line in registry.render_all()),
            media_type=registry.content_type,
        )

    return router
