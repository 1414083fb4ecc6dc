"""
Logging for the site builder.

Build progress ("✓ Processed js/app.js", "📁 Copying data/llm directory...")
is logged at INFO on the ``sitebuilder`` logger tree and printed to the
console as-is; warnings and errors keep a level prefix. An optional rotating
log file receives every record with full context.

Examples:
    >>> from sitebuilder.utils.logger import setup_logger, get_logger
    >>> setup_logger("sitebuilder", level="INFO", log_file=Path("logs/build.log"))
    >>> get_logger("sitebuilder.core.walker").info("✓ Copied img/logo.png")
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from .path_utils import ensure_directory

# Valid log levels
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Log file format
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Console formats: progress lines bare, everything else prefixed
PROGRESS_FORMAT = "%(message)s"
PREFIXED_FORMAT = "%(levelname)s: %(message)s"

# 10MB per log file, 5 backups
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


class BuildConsoleFormatter(logging.Formatter):
    """Prints INFO records bare and prefixes the other levels."""

    def __init__(self) -> None:
        super().__init__(PREFIXED_FORMAT)
        self._progress = logging.Formatter(PROGRESS_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno == logging.INFO:
            return self._progress.format(record)
        return super().format(record)


def setup_logger(
    name: str = "sitebuilder",
    level: str = "INFO",
    log_file: Path | None = None
) -> logging.Logger:
    """
    Configure and return a logger with console and optional file output.

    Calling it again for the same logger does not add duplicate handlers.

    Args:
        name: Logger name; module loggers are children of ``"sitebuilder"``.
        level: Console and logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional rotating log file, written at DEBUG level.

    Raises:
        ValueError: If level is not a valid log level.
        OSError: If the log directory cannot be created.
    """
    if level.upper() not in VALID_LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of {VALID_LOG_LEVELS}")

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    has_console_handler = any(
        isinstance(h, logging.StreamHandler)
        and not isinstance(h, logging.handlers.RotatingFileHandler)
        for h in logger.handlers
    )
    has_file_handler = any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers)

    if not has_console_handler:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, level.upper()))
        console_handler.setFormatter(BuildConsoleFormatter())
        logger.addHandler(console_handler)

    if log_file is not None and not has_file_handler:
        ensure_directory(log_file.parent)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Return a module logger such as ``sitebuilder.core.transformer``.

    Module loggers get no handlers of their own: they are created at import
    time, before ``setup_logger`` runs, and propagate to the configured
    ``sitebuilder`` logger, so each record is printed once.
    """
    return logging.getLogger(name)
