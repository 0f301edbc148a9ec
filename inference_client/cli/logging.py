"""Logging setup for the CLI. The SDK itself never installs handlers."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

_LOGGER_NAME = "inference_client"

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True, slots=True)
class LoggingState:
    level: int
    propagate: bool
    handlers: tuple[logging.Handler, ...]


def _level_for_verbosity(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(*, verbosity: int, quiet: bool = False) -> LoggingState:
    """Route SDK logs to stderr and return the state to restore afterwards."""
    logger = logging.getLogger(_LOGGER_NAME)
    previous = LoggingState(
        level=logger.level,
        propagate=logger.propagate,
        handlers=tuple(logger.handlers),
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))

    logger.handlers = [handler]
    logger.setLevel(logging.ERROR if quiet else _level_for_verbosity(verbosity))
    logger.propagate = False
    return previous


def restore_logging(previous: LoggingState) -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in logger.handlers:
        if handler not in previous.handlers:
            handler.close()
    logger.handlers = list(previous.handlers)
    logger.setLevel(previous.level)
    logger.propagate = previous.propagate
