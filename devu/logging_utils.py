"""
Logging helpers for devu.

stdout belongs to command output (see devu.output), so diagnostics go
to stderr through a handler on the "devu" logger, prefixed so they are
easy to tell apart from git's own messages.
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "devu"
LOG_FORMAT = "devu: %(levelname)s %(name)s: %(message)s"


def verbosity_to_level(verbosity: int) -> int:
    """
    verbosity == 0 -> WARNING
    verbosity == 1 -> INFO
    verbosity >= 2 -> DEBUG
    """

    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(verbosity: int) -> logging.Logger:
    """
    Point the devu logger at stderr with the level for -v count.

    Safe to call more than once per process; the previous handler is
    replaced rather than stacked.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(verbosity_to_level(verbosity))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    # Keep devu diagnostics out of whatever the root logger is doing.
    logger.propagate = False
    return logger
