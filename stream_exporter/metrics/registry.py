"""Process-wide store of published gauge values.

One MetricsRegistry is built at startup and handed to both the poller (the
only writer) and the HTTP layer (readers). It owns a private prometheus
CollectorRegistry, so nothing leaks into or out of the library's global
default registry.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterator, Mapping, Optional, Tuple

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Gauge,
    GCCollector,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)

from shared.metrics import get_gauge


class ExpositionLines:
    """Lazy view over the registry's exposition text.

    Each iteration renders a fresh snapshot, so the object can be iterated
    any number of times.
    """

    def __init__(self, registry: CollectorRegistry):
        self._registry = registry

    def __iter__(self) -> Iterator[str]:
        payload = generate_latest(self._registry).decode("utf-8")
        for line in payload.splitlines():
            yield line + "\n"


class MetricsRegistry:
    def __init__(self, include_process_metrics: bool = False):
        self.collector_registry = CollectorRegistry(auto_describe=True)
        self._gauges: Dict[str, Tuple[Gauge, Tuple[str, ...]]] = {}
        self._lock = threading.Lock()
        if include_process_metrics:
            ProcessCollector(registry=self.collector_registry)
            PlatformCollector(registry=self.collector_registry)
            GCCollector(registry=self.collector_registry)

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST

    def _gauge_for(
        self, name: str, labelnames: Tuple[str, ...], documentation: Optional[str]
    ) -> Gauge:
        with self._lock:
            entry = self._gauges.get(name)
            if entry is None:
                gauge = get_gauge(
                    name,
                    documentation or name.replace("_", " "),
                    registry=self.collector_registry,
                    labelnames=labelnames,
                )
                self._gauges[name] = (gauge, labelnames)
                return gauge
        gauge, known = entry
        if known != labelnames:
            raise ValueError(
                f"Gauge '{name}' uses labels {list(known)}, got {list(labelnames)}"
            )
        return gauge

    def declare_gauge(
        self, name: str, documentation: str, labelnames: Tuple[str, ...] = ()
    ) -> None:
        """Register a gauge up front so its HELP text is fixed."""
        self._gauge_for(name, tuple(sorted(labelnames)), documentation)

    def set_gauge(
        self,
        name: str,
        labels: Mapping[str, str],
        value: float,
        documentation: Optional[str] = None,
    ) -> None:
        """Upsert one labeled sample; the last write wins."""
        gauge = self._gauge_for(name, tuple(sorted(labels)), documentation)
        if labels:
            gauge.labels(**labels).set(value)
        else:
            gauge.set(value)

    def get_value(self, name: str, labels: Mapping[str, str]) -> Optional[float]:
        return self.collector_registry.get_sample_value(name, dict(labels))

    def render_all(self) -> ExpositionLines:
        return ExpositionLines(self.collector_registry)

    def render(self) -> bytes:
        return generate_latest(self.collector_registry)
