"""Verbosity-graded logging for roadmapper commands.

Output goes to stderr so that timeline charts and CSV written to stdout stay
clean. ``-v 1`` reports what a command changed on the board, ``-v 2`` adds
the lane fit checks and skipped projects, and ``-v 3`` is full debug output.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

CHANGES_LEVEL = 25  # INFO < CHANGES < WARNING
CHECKS_LEVEL = 15  # DEBUG < CHECKS < INFO

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0
VERBOSITY_CHANGES = 1
VERBOSITY_CHECKS = 2
VERBOSITY_DEBUG = 3

# Indexed by verbosity
_LEVELS = (logging.ERROR, CHANGES_LEVEL, CHECKS_LEVEL, logging.DEBUG)


class RoadmapperLogger(logging.Logger):
    """Logger with one method per roadmapper verbosity step.

    - changes(): lane assignments, moved dates, imported and reordered projects
    - checks(): each lane a project was tried against, filter and skip decisions
    """

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> RoadmapperLogger:
    """Return the shared ``roadmapper`` logger."""
    logging.setLoggerClass(RoadmapperLogger)
    logger = logging.getLogger("roadmapper")
    assert isinstance(logger, RoadmapperLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Point the roadmapper logger at a stream for a ``--verbose`` level.

    Levels above 3 are treated as 3. Safe to call again to reconfigure.

    Args:
        verbosity: 0=errors only, 1=changes, 2=checks, 3=debug
        stream: Where messages go (defaults to sys.stderr)
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(_LEVELS[max(VERBOSITY_SILENT, min(verbosity, VERBOSITY_DEBUG))])

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and go back to errors only."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)


def changes_enabled() -> bool:
    """Whether commands should print what they changed (``-v 1``)."""
    return get_logger().isEnabledFor(CHANGES_LEVEL)


def checks_enabled() -> bool:
    """Whether per-project detail should be printed (``-v 2``)."""
    return get_logger().isEnabledFor(CHECKS_LEVEL)
