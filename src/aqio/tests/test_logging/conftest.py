import pytest

from aqio.core.logging.builder import setup_logging, stop_queue_logging

from ..conftest import make_test_settings


@pytest.fixture(autouse=True)
def restore_logging():
    """These tests reconfigure the root logger; put the session configuration back afterwards."""
    yield
    stop_queue_logging()
    setup_logging(make_test_settings(LOG_LEVEL="INFO"))
