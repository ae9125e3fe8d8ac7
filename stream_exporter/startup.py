from shared.logging.json import configure_logging
from stream_exporter.core.config import Settings
from stream_exporter.core.logger import get_logger

logger = get_logger("exporter.startup")


def initialize_application(cfg: Settings) -> None:
    """Configure logging, then validate everything that must hold before serving.

    Raises ConfigurationError when the API token is missing or ``listen`` is
    malformed.
    """
    configure_logging(
        service=cfg.otel_service_name,
        level=cfg.app_log_level,
        environment=cfg.app_environment,
        redaction_patterns=cfg.app_log_redaction_patterns,
        log_format=cfg.app_log_format,
    )
    logger.info("initializing_application")
    cfg.require_api_token()
    host, port = cfg.listen_address
    logger.info(
        "application_initialized",
        extra={
            "host": host,
            "port": port,
            "metrics_path": cfg.metrics_path,
            "include_accounts": cfg.included_account_ids,
            "poll_interval_s": cfg.poll_interval_seconds,
        },
    )
