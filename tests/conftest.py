import logging

import pytest


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logging so they never outlive a test's captured streams."""
    yield
    logger = logging.getLogger("dipolarrsa")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
