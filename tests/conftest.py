import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def reset_log_sinks():
    yield
    logger.remove()
