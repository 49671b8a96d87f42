"""Tests for logging configuration."""

import logging

from session_renderer.app_logging import LOGGER_NAME, configure_logging


def test_repeated_configuration_keeps_one_handler() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()

    configure_logging()
    configure_logging("debug")

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert logger.propagate is False


def test_unknown_level_falls_back_to_info() -> None:
    logger = configure_logging("chatty")

    assert logger.level == logging.INFO
