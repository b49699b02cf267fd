import pytest

from catalog.config.settings import Settings
from catalog.core.logging.builder import setup_logging


@pytest.fixture
def restore_logging(test_settings: Settings):
    """Re-apply the suite's logging configuration after a test replaced it."""
    yield
    setup_logging(test_settings)
