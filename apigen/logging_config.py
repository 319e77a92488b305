"""Logging configuration shared by every apigen module.

Modules obtain their logger with ``get_logger(__name__)``; the command
line entry point calls ``setup_logging`` once per run.
"""

import logging
from pathlib import Path

LOGGER_NAME = "apigen"
DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: str | int = "WARNING", log_file: str | Path | None = None) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Log level name or number.
        log_file: Optional file that receives the log in addition to stderr.

    Returns:
        The configured package root logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(DEFAULT_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(Path(log_file), encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the package root logger."""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
