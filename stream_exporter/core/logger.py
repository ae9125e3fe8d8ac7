"""Exporter logger shim.

Delegates to the shared logger so modules can log at import time; the
entrypoint replaces the fallback handler via configure_logging.
"""

from __future__ import annotations

import logging

from shared.logging.logger import get_logger as _shared_get_logger


def get_logger(name: str) -> logging.Logger:
    return _shared_get_logger(name)
