from .json import (
    CustomJsonFormatter,
    KeyValueTextFormatter,
    SensitiveDataFilter,
    configure_logging,
)
from .logger import get_logger

__all__ = [
    "CustomJsonFormatter",
    "KeyValueTextFormatter",
    "SensitiveDataFilter",
    "configure_logging",
    "get_logger",
]
