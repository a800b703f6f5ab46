"""Pytest fixtures for pydelegate tests."""

import logging

import pytest

from pydelegate import Delegate
from pydelegate.config import TestingConfig
from pydelegate.lib.logger import LOGGER_NAME


@pytest.fixture
def delegate():
    """A fresh delegate using the testing configuration."""
    return Delegate("test", config=TestingConfig)


@pytest.fixture
def calls():
    """Shared list listeners append to, to check invocation order."""
    return []


@pytest.fixture
def package_logger():
    """The pydelegate logger, restored to a pristine state after the test."""
    logger = logging.getLogger(LOGGER_NAME)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
