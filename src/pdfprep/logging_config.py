"""Logging configuration for pdfprep."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAME = "pdfprep"

_PREFIXES = {
    logging.DEBUG: "[debug] ",
    logging.WARNING: "Warning: ",
    logging.ERROR: "Error: ",
    logging.CRITICAL: "Error: ",
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger under the pdfprep namespace.

    Args:
        name: Module name (usually __name__). None returns the package logger.

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger(LOGGER_NAME)
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


class ConsoleFormatter(logging.Formatter):
    """Short, level-prefixed console output.

    INFO lines are printed bare; other levels get a prefix. When verbose
    output is on, the emitting module is appended to debug lines.
    """

    def __init__(self, show_origin: bool = False):
        super().__init__()
        self.show_origin = show_origin

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info and record.levelno >= logging.ERROR:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        prefix = _PREFIXES.get(record.levelno, "")
        if record.levelno == logging.DEBUG and self.show_origin:
            return f"{prefix}{message} ({record.name})"
        return f"{prefix}{message}"


class InfoFilter(logging.Filter):
    """Let through only records below WARNING (stdout side)."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


def setup_logging(
    verbosity: int = 0,
    quiet: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure logging for the pdfprep CLI.

    Args:
        verbosity: 0=normal, 1=verbose (-v), 2=debug (-vv)
        quiet: Only errors reach the console
        log_file: Optional file receiving every record at DEBUG
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()

    if quiet:
        console_level = logging.ERROR
    elif verbosity >= 2:
        console_level = logging.DEBUG
    else:
        console_level = logging.INFO

    logger.setLevel(logging.DEBUG)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(console_level)
    stdout_handler.setFormatter(ConsoleFormatter(show_origin=verbosity >= 2))
    stdout_handler.addFilter(InfoFilter())
    logger.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(ConsoleFormatter())
    logger.addHandler(stderr_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

