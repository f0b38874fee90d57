"""Logging setup for the taxsketch command line."""

from __future__ import annotations

import logging
from typing import Optional

from rich.logging import RichHandler

LOGGER_NAME = "taxsketch"


def setup_logger(log_file: Optional[str] = None, log_level: int = logging.INFO) -> logging.Logger:
    """Configure the ``taxsketch`` logger.

    Messages go to the console through rich; with *log_file* they are also
    appended to that file with source locations.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(log_level)
    logger.propagate = False

    shell_handler = RichHandler(show_path=False)
    shell_handler.setLevel(log_level)
    shell_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(shell_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(
            "%(levelname)s %(asctime)s [%(filename)s:%(funcName)s:%(lineno)d] %(message)s"
        ))
        logger.addHandler(file_handler)

    return logger
