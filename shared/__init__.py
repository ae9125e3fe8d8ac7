"""Shared utilities and components for the exporter services."""

from .config import BaseLoggingConfig
from .constants import LogFormat

__all__ = [
    "LogFormat",
    "BaseLoggingConfig",
]
