"""Logging setup for the tutor."""
import logging
import os
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "french_tutor"


def setup_logging(settings) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.log_level.upper())

    # Safe to call twice: only one file handler is ever attached
    if any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        return logger

    os.makedirs(settings.log_dir, exist_ok=True)
    log_path = os.path.join(settings.log_dir, settings.log_file)
    file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(file_handler)
    return logger
