"""
Logging configuration for the recovery intelligence engine and its API.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

# Packages whose module loggers (logging.getLogger(__name__)) get our handlers
APP_LOGGERS = ("recovery_intel", "api")

# HTTP client libraries log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai")

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    quiet: Sequence[str] = NOISY_LOGGERS,
) -> logging.Logger:
    """
    Attach console (and optionally file) handlers to the application loggers.

    Safe to call more than once; earlier handlers are replaced.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR); unknown names mean INFO
        log_file: Optional file path to also write logs to
        quiet: Third-party loggers raised to WARNING

    Returns:
        The engine's package logger
    """
    level_num = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    for handler in handlers:
        handler.setLevel(level_num)
        handler.setFormatter(formatter)

    for name in APP_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(level_num)
        logger.handlers = list(handlers)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger(APP_LOGGERS[0])
