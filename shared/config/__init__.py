"""Shared configuration base classes.

Services inherit these settings so every process logs the same way and reads
its environment with the same conventions.
"""

from pydantic_settings import BaseSettings


class BaseLoggingConfig(BaseSettings):
    """Common logging configuration for all services."""

    app_log_level: str = "INFO"
    app_log_format: str = "json"  # json|text
    app_log_redaction_patterns: list[str] = [
        "password",
        "token",
        "secret",
        "key",
        "authorization",
        "cookie",
    ]
    app_environment: str = "production"

    otel_service_name: str = "unknown"  # Should be overridden by service


__all__ = ["BaseLoggingConfig"]
