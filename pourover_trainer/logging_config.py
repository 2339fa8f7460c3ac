"""Logging setup for the ``pourover_trainer`` namespace."""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "POUROVER_LOG_LEVEL"
LOG_FILE_ENV = "POUROVER_LOG_FILE"


def level_from_env(default: int = logging.WARNING) -> int:
    raw = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if raw == "":
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> None:
    """Configure the package logger with a stdout handler and an optional file.

    Safe to call more than once; previous handlers are replaced.
    """
    logger = logging.getLogger("pourover_trainer")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
