import logging

import pytest

from devu.logging_utils import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_devu_logger():
    """cli.main binds a handler to the current stderr; drop it between tests."""

    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
