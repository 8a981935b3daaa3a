"""Logging configuration for PathWeave."""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

LOGGER_NAME = "pathweave"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Set up logging for the pathweave package.

    Calling this again only updates the level; handlers are attached once.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of a rotating log file

    Returns:
        The configured package logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(LOG_FORMAT)

    if not any(getattr(h, "_pathweave", False) for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler._pathweave = True
        logger.addHandler(console_handler)

    for handler in logger.handlers:
        if getattr(handler, "_pathweave", False):
            handler.setLevel(numeric_level)

    if log_file is not None:
        log_file = Path(log_file)
        already = any(
            isinstance(h, logging.handlers.RotatingFileHandler)
            and Path(h.baseFilename) == log_file.resolve()
            for h in logger.handlers
        )
        if not already:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10485760,  # 10MB
                backupCount=5,
            )
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
