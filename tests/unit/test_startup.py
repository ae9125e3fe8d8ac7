from unittest.mock import patch

import pytest

from stream_exporter.core.config import Settings
from stream_exporter.core.errors import ConfigurationError
from stream_exporter.startup import initialize_application


@patch("stream_exporter.startup.configure_logging")
def test_configures_logging_from_settings(mock_configure):
    cfg = Settings(cf_api_token="t", app_log_level="DEBUG", app_log_format="text")

    initialize_application(cfg)

    mock_configure.assert_called_once_with(
        service="stream_exporter",
        level="DEBUG",
        environment=cfg.app_environment,
        redaction_patterns=cfg.app_log_redaction_patterns,
        log_format="text",
    )


@patch("stream_exporter.startup.configure_logging")
def test_missing_token_is_fatal(mock_configure):
    with pytest.raises(ConfigurationError):
        initialize_application(Settings(cf_api_token=""))


@patch("stream_exporter.startup.configure_logging")
def test_malformed_listen_is_fatal(mock_configure):
    with pytest.raises(ConfigurationError):
        initialize_application(Settings(cf_api_token="t", listen="nope"))
