"""Logging setup for the terminal apps.

The TUI owns the terminal, so log records go to a file that can be tailed
separately. Without ``debug`` the package logger gets a NullHandler and
nothing is written.
"""

from __future__ import annotations

import logging
from pathlib import Path

DEFAULT_LOG_FILE = "debug.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(debug: bool = False, log_file: str | Path = DEFAULT_LOG_FILE) -> logging.Logger:
    """
    Configure the ``foldtree`` logger.

    Args:
        debug: Write DEBUG and above to ``log_file`` when True.
        log_file: Destination file, appended to.

    Returns:
        The configured package logger.

    Raises:
        OSError: If the log file cannot be opened.
    """
    logger = logging.getLogger("foldtree")
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.propagate = False
    if debug:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
    else:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.WARNING)
    return logger
