"""Tests for the CLI logging setup."""

import logging

from rich.logging import RichHandler

from sleeptimer.log_setup import LOGGER_NAME, setup_logging


class TestSetupLogging:
    def test_installs_single_rich_handler(self) -> None:
        setup_logging()
        logger = setup_logging(logging.DEBUG)
        rich_handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert logger.name == LOGGER_NAME

    def test_sets_level(self) -> None:
        assert setup_logging(logging.INFO).level == logging.INFO
        assert setup_logging().level == logging.WARNING

    def test_child_loggers_inherit(self) -> None:
        setup_logging(logging.DEBUG)
        child = logging.getLogger("sleeptimer.core.timer")
        assert child.getEffectiveLevel() == logging.DEBUG
