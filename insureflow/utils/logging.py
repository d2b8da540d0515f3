"""Centralized logging configuration.

Module loggers are created at import time, before settings are loaded, so
``configure_logging`` re-levels every logger handed out by ``get_logger``
once ``LOG_LEVEL`` is known.
"""

import logging
import sys
from typing import Dict, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_default_level = "INFO"
# Logger name -> explicit level override, None when following the default
_loggers: Dict[str, Optional[str]] = {}


def _to_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def _apply_level(logger: logging.Logger, level: str) -> None:
    numeric = _to_level(level)
    logger.setLevel(numeric)
    for handler in logger.handlers:
        handler.setLevel(numeric)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)
        level: Optional log level override; without it the logger follows
            the level passed to ``configure_logging``

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    _loggers[name] = level

    # Avoid duplicate handlers
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(console_handler)

    _apply_level(logger, level or _default_level)
    return logger


def configure_logging(level: str) -> None:
    """Set the default level and apply it to every logger without an override."""
    global _default_level

    _to_level(level)
    _default_level = level
    for name, override in _loggers.items():
        if override is None:
            _apply_level(logging.getLogger(name), level)
