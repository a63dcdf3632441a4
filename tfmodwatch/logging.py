"""Logging utilities for tfmodwatch commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "tfmodwatch"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the tfmodwatch hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def parse_log_level(level: str | None) -> int:
    """Map a level name to a logging constant, defaulting to INFO."""
    if not level:
        return logging.INFO
    return _LEVELS.get(level.strip().lower(), logging.INFO)


def configure_logging(
    *,
    level: str | None = "error",
    verbose: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the tfmodwatch logger with stderr output and optional file sink."""
    resolved = logging.DEBUG if verbose else parse_log_level(level)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(resolved)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI runs more than once.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(resolved)
    stream_handler.setFormatter(logging.Formatter("[tfmodwatch] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(resolved)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger", "parse_log_level"]
