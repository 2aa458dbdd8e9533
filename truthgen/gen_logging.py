"""
Logging configuration for the truthgen generation pipeline.

Usage in modules:
    from truthgen.gen_logging import get_logger
    logger = get_logger(__name__)

The root logger name is "truthgen". Levels are controlled by the CLI.
"""

from __future__ import annotations

import logging
import sys

_LOGGER_NAME = "truthgen"


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Return a child logger under the truthgen hierarchy.

    "truthgen.generator" stays "truthgen.generator"; anything outside the
    package is re-rooted by its last dotted component.
    """
    if name is None or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    if name.startswith(_LOGGER_NAME + "."):
        return logging.getLogger(name)
    short = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{_LOGGER_NAME}.{short}")


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Configure the truthgen logger hierarchy.

    Levels:
        --verbose / -v  -> DEBUG   (template resolution detail)
        (default)       -> INFO    (per-view progress + summary)
        --quiet / -q    -> WARNING (failed views and errors only)
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    root_logger = logging.getLogger(_LOGGER_NAME)
    root_logger.setLevel(level)

    # Avoid duplicate handlers when called multiple times
    if root_logger.handlers:
        for handler in root_logger.handlers:
            handler.setLevel(level)
            if isinstance(handler, logging.StreamHandler):
                handler.setStream(sys.stderr)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_GenFormatter())
    root_logger.addHandler(handler)
    root_logger.propagate = False


class _GenFormatter(logging.Formatter):
    """Plain messages for INFO and below, level-tagged above."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.levelno >= logging.WARNING:
            return f"[{record.levelname}] {message}"
        return message
