import logging

import pytest


@pytest.fixture
def restore_root_logging():
    """Put back root handlers and level after a test installs its own."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)
