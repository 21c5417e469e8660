# src/combinator/utils/trace.py
import logging
import sys
from typing import Optional, TextIO

LOGGER_NAME = "combinator"
TRACE_FORMAT = "[DEBUG] %(message)s"


def setup_trace_logger(verbose: bool, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configures the 'combinator' logger for one run and returns it.

    The handler is rebuilt on every call so that it always writes to the
    current stderr (tests swap sys.stderr between runs). Only debug traces
    go through this logger, so a quiet run leaves the level at WARNING.
    """
    log = logging.getLogger(LOGGER_NAME)
    for handler in list(log.handlers):
        log.removeHandler(handler)
    log.propagate = False
    log.setLevel(logging.DEBUG if verbose else logging.WARNING)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(TRACE_FORMAT))
    log.addHandler(handler)
    return log


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Returns a logger under the 'combinator' namespace."""
    if not name or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
