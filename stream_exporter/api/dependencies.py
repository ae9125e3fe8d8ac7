from fastapi import Request

from stream_exporter.metrics.registry import MetricsRegistry


def get_registry(request: Request) -> MetricsRegistry:
    return request.app.state.registry  # type: ignore[return-value]
