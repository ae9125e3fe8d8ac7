from enum import Enum


class LogFormat(str, Enum):
    """Supported log line renderings."""

    JSON = "json"
    TEXT = "text"

    @classmethod
    def parse(cls, value: str) -> "LogFormat":
        """Unknown values fall back to JSON."""
        try:
            return cls(value.lower())
        except ValueError:
            return cls.JSON
