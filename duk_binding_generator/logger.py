"""
Logging utilities for the bindings generator
"""

import logging
import sys

LOGGER_NAME = "duk_binding_generator"


def setup_logging(level: int = logging.INFO, stream=None) -> logging.Logger:
    """
    Install a single stream handler on the package logger.

    Args:
        level: Minimum level that is emitted
        stream: Target stream, stdout when omitted
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Clear existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(handler)
    return logger


def debug(message: str):
    logging.getLogger(LOGGER_NAME).debug(message)


def info(message: str):
    logging.getLogger(LOGGER_NAME).info(message)


def warning(message: str):
    logging.getLogger(LOGGER_NAME).warning(message)
