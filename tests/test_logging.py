"""Tests for logging setup."""

import logging
import logging.handlers

import pytest

from pathweave.logging_config import LOGGER_NAME, setup_logging


@pytest.fixture
def clean_logger():
    logger = logging.getLogger(LOGGER_NAME)
    saved = list(logger.handlers)
    level = logger.level
    for handler in saved:
        logger.removeHandler(handler)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in saved:
        logger.addHandler(handler)
    logger.setLevel(level)


class TestSetupLogging:
    """Test the package logging configuration."""

    def test_returns_package_logger(self, clean_logger):
        logger = setup_logging("DEBUG")
        assert logger is clean_logger
        assert logger.level == logging.DEBUG

    def test_console_handler_added_once(self, clean_logger):
        setup_logging("INFO")
        setup_logging("INFO")
        streams = [h for h in clean_logger.handlers if isinstance(h, logging.StreamHandler)]
        assert len(streams) == 1

    def test_repeat_call_updates_level(self, clean_logger):
        setup_logging("INFO")
        setup_logging("warning")
        assert clean_logger.level == logging.WARNING
        assert clean_logger.handlers[0].level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, clean_logger):
        logger = setup_logging("CHATTY")
        assert logger.level == logging.INFO

    def test_file_handler(self, clean_logger, tmp_path):
        log_file = tmp_path / "logs" / "render.log"
        setup_logging("INFO", log_file)
        setup_logging("INFO", log_file)

        files = [h for h in clean_logger.handlers
                 if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(files) == 1

        logging.getLogger("pathweave.renderer").info("hello from the renderer")
        files[0].flush()
        text = log_file.read_text()
        assert "pathweave.renderer - INFO - hello from the renderer" in text
