"""Exporter error taxonomy.

Every error carries a stable ``code`` and a ``details`` dict so log lines stay
structured. Whether an error is fatal is decided by the caller: enumeration
and startup errors end the process, per-account errors are logged and skipped.
"""

from typing import Any, Dict, Optional


class ExporterError(Exception):
    """Base exception for the exporter."""

    def __init__(
        self, code: str, message: str, details: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def as_log_extra(self) -> Dict[str, Any]:
        return {"error_code": self.code, "error": self.message, **self.details}


class ConfigurationError(ExporterError):
    """Missing or invalid startup configuration."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("CONFIGURATION_ERROR", message, details)


class AuthenticationError(ExporterError):
    """No credential configured, or the provider rejected it."""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class RemoteError(ExporterError):
    """Transport or API failure talking to the analytics provider."""

    def __init__(
        self,
        service: str,
        message: str = "Remote call failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.service = service
        super().__init__("REMOTE_ERROR", f"{service}: {message}", details)


class ListenError(ExporterError):
    """The HTTP listener could not be bound."""

    def __init__(
        self,
        message: str = "Could not bind listen address",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("LISTEN_ERROR", message, details)


class EmptyWindowError(ExporterError, ValueError):
    """The provider reported no buckets, so there is nothing to average."""

    def __init__(
        self,
        message: str = "No samples reported in window",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("EMPTY_WINDOW", message, details)
