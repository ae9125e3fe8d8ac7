"""Logger lookup for modules that may log before the entrypoint runs.

Until ``configure_logging`` has been called, the first ``get_logger`` call
attaches a key=value stderr handler to a bare root logger so early records
keep their ``extra`` fields and stay redacted.
"""

from __future__ import annotations

import logging
import sys

EARLY_REDACTION_PATTERNS = ("token", "authorization", "secret")

_configured = False


def get_logger(name: str, auto_configure: bool = True) -> logging.Logger:
    if auto_configure and not _configured:
        _attach_early_handler(logging.getLogger())
    return logging.getLogger(name)


def _attach_early_handler(root: logging.Logger) -> None:
    # Imported here: shared.logging.json imports this module.
    from shared.logging.json import KeyValueTextFormatter

    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(KeyValueTextFormatter(EARLY_REDACTION_PATTERNS))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    mark_configured()


def is_configured() -> bool:
    return _configured


def mark_configured() -> None:
    global _configured
    _configured = True
