"""Metric construction helpers.

Thin wrappers around prometheus_client primitives with service name
prefixing and naming validation. Every helper takes an explicit registry so
callers own their metric state instead of sharing the process default.
"""

from __future__ import annotations

import re
from typing import Sequence

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

_NAME_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


def validate_name(name: str) -> str:
    if not _NAME_RE.match(name):
        raise ValueError(
            f"Invalid metric name '{name}'. Use snake_case alphanumerics/underscores."
        )
    return name


def _prefix(name: str, service: str | None) -> str:
    if service and not name.startswith(service + "_"):
        return f"{service}_{name}"
    return name


def get_counter(
    name: str,
    documentation: str,
    registry: CollectorRegistry,
    service: str | None = None,
    labelnames: Sequence[str] = (),
) -> Counter:
    return Counter(
        validate_name(_prefix(name, service)),
        documentation,
        labelnames=labelnames,
        registry=registry,
    )


def get_histogram(
    name: str,
    documentation: str,
    registry: CollectorRegistry,
    service: str | None = None,
    buckets: list[float] | None = None,
) -> Histogram:
    full_name = validate_name(_prefix(name, service))
    if buckets is None:
        return Histogram(full_name, documentation, registry=registry)
    return Histogram(full_name, documentation, buckets=buckets, registry=registry)


def get_gauge(
    name: str,
    documentation: str,
    registry: CollectorRegistry,
    service: str | None = None,
    labelnames: Sequence[str] = (),
) -> Gauge:
    return Gauge(
        validate_name(_prefix(name, service)),
        documentation,
        labelnames=labelnames,
        registry=registry,
    )


__all__ = [
    "validate_name",
    "get_counter",
    "get_histogram",
    "get_gauge",
]
