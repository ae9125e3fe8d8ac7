from typing import Sequence

from pydantic import Field, field_validator

from shared.config import BaseLoggingConfig

from .errors import ConfigurationError

DEFAULT_METRICS_PATH = "/metrics"


def normalize_metrics_path(path: str) -> str:
    path = path.strip()
    if not path:
        return DEFAULT_METRICS_PATH
    if not path.startswith("/"):
        path = "/" + path
    return path


def parse_listen_address(listen: str) -> tuple[str, int]:
    """Split ``host:port`` into its parts.

    ``:8080`` binds every interface; IPv6 hosts are written ``[::1]:8080``.
    """
    host, sep, port_text = listen.strip().rpartition(":")
    if not sep:
        raise ConfigurationError(
            "listen must be in addr:port form", details={"listen": listen}
        )
    try:
        port = int(port_text)
    except ValueError:
        raise ConfigurationError(
            "listen port is not a number", details={"listen": listen}
        ) from None
    if not 0 <= port <= 65535:
        raise ConfigurationError("listen port out of range", details={"listen": listen})
    host = host.strip("[]") or "0.0.0.0"
    return host, port


def split_account_list(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseLoggingConfig):
    # HTTP server
    listen: str = ":8080"  # omit addr to listen on all interfaces
    metrics_path: str = DEFAULT_METRICS_PATH

    # Cloudflare
    cf_api_token: str = ""
    cf_api_base_url: str = "https://api.cloudflare.com/client/v4"
    cf_graphql_endpoint: str = "https://api.cloudflare.com/client/v4/graphql/"
    include_accounts: str = ""  # comma-separated account ids
    http_timeout_seconds: float = 30.0

    # Polling
    poll_interval_seconds: float = Field(60.0, gt=0)
    analytics_window_minutes: int = Field(30, gt=0)

    # Exposition
    include_process_metrics: bool = True

    otel_service_name: str = "stream_exporter"

    @field_validator("metrics_path")
    @classmethod
    def _normalize_metrics_path(cls, value: str) -> str:
        return normalize_metrics_path(value)

    @property
    def included_account_ids(self) -> list[str]:
        return split_account_list(self.include_accounts)

    @property
    def listen_address(self) -> tuple[str, int]:
        return parse_listen_address(self.listen)

    def require_api_token(self) -> str:
        if not self.cf_api_token:
            raise ConfigurationError(
                "Please provide CF_API_TOKEN (or --cf_api_token)"
            )
        return self.cf_api_token


def load_settings(argv: Sequence[str] | None = None) -> Settings:
    """Build settings from the environment, overlaid with command-line flags.

    Flags use the field names, e.g. ``--listen :9100 --cf_api_token ...``.
    """
    if argv is None:
        return Settings()
    return Settings(_cli_parse_args=list(argv))

