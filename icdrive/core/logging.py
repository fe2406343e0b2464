"""Logging utilities for icdrive modules."""

import logging

ROOT_LOGGER_NAME = 'icdrive'


def get_logger(name: str) -> logging.Logger:
    """Get a logger that automatically inherits from root logger.

    This ensures that loggers work with basicConfig() without needing
    explicit setup_logging() calls. The logger will:
    - Propagate to root logger (default behavior)
    - Only set a default level if root logger has no handlers

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    # Only set default level if root logger has no handlers
    # (i.e., basicConfig hasn't been called yet)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logger.setLevel(logging.WARNING)

    return logger


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure logging for icdrive modules.

    Sets the level on the package logger and every icdrive logger
    created so far, keeping propagation enabled.

    Args:
        level: Logging level (default: logging.INFO)
    """
    manager = logging.Logger.manager
    names = [ROOT_LOGGER_NAME] + [
        name for name in list(manager.loggerDict)
        if name.startswith(ROOT_LOGGER_NAME + '.')
    ]
    for logger_name in names:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True
