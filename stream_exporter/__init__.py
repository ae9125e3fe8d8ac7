"""Prometheus exporter for Cloudflare Stream viewing analytics."""

__version__ = "0.1.0"
