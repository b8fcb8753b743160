"""Logging for the support desk service.

Every component logs through the single ``support_desk`` logger. Modules grab
it at import time, before ``main`` has read the settings, so configuration
must be applied to an already existing logger rather than only on first use.
"""

import logging
from pathlib import Path
from typing import Optional


APP_LOGGER_NAME = "support_desk"
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _has_file_handler(logger: logging.Logger, path: Path) -> bool:
    return any(
        isinstance(h, logging.FileHandler) and Path(h.baseFilename) == path.resolve()
        for h in logger.handlers
    )


def setup_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure a logger with console output and an optional log file.

    Safe to call repeatedly: the level is reapplied to every handler, the
    console handler is added once, and a file handler is attached the first
    time a given path is requested.

    Args:
        name: Logger name
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL; unknown names fall back to INFO
        log_file: Optional path to a log file, parent directories are created

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        if not _has_file_handler(logger, path):
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger


# Application logger instance
app_logger: Optional[logging.Logger] = None


def init_app_logger(settings) -> logging.Logger:
    """Apply the configured level and log file to the application logger."""
    global app_logger

    app_logger = setup_logger(
        name=APP_LOGGER_NAME,
        log_level=settings.log_level,
        log_file=settings.log_file
    )

    return app_logger


def get_app_logger() -> logging.Logger:
    """The application logger, console-only until init_app_logger runs."""
    if app_logger is None:
        return setup_logger(APP_LOGGER_NAME)

    return app_logger


def mask_secret(value: Optional[str]) -> str:
    """Mask the gateway API key for the startup banner."""
    if not value:
        return "Not set"
    if len(value) > 12:
        return value[:8] + "..." + value[-4:]
    return "***"
