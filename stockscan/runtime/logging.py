"""Logging for the stockscan namespace.

Every module logs through ``get_logger(__name__)``; records go to stderr so
that command output on stdout stays clean for piping.

Recognized OCR text and parsed line contents are only ever logged at DEBUG,
scan outcomes (line counts, confidence, match summaries) at INFO, and store
or recognizer failures at WARNING/ERROR.

The level comes from, in order: an explicit ``configure_logging(level)``
call, the ``STOCKSCAN_LOG_LEVEL`` environment variable (a level name such as
``debug`` or a number such as ``10``), then ``DEFAULT_LOG_LEVEL``.
"""

import logging
import os
import sys

DEFAULT_LOG_LEVEL = logging.INFO
LOG_LEVEL_ENV = "STOCKSCAN_LOG_LEVEL"

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
# DEBUG output points at the emitting line; useful when tuning parser heuristics
LOG_FORMAT_DEBUG = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"

LOGGER_NAMESPACE = "stockscan"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# The one handler this module installs; replaced, never duplicated
_handler: logging.Handler | None = None


def resolve_level(value: str | None) -> int:
    """Turn a level name or number from the environment into a logging level.

    Unknown or empty values fall back to DEFAULT_LOG_LEVEL.
    """
    if not value:
        return DEFAULT_LOG_LEVEL
    value = value.strip().upper()
    if value.isdigit():
        return int(value)
    return _LEVELS.get(value, DEFAULT_LOG_LEVEL)


def _formatter(level: int) -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT_DEBUG if level <= logging.DEBUG else LOG_FORMAT)


def configure_logging(level: int | None = None, *, force: bool = False) -> None:
    """Install the stderr handler on the stockscan logger.

    Runs once; later calls are no-ops unless ``force`` is set, in which case the
    previous handler is swapped out rather than stacked.
    """
    global _handler

    if _handler is not None and not force:
        return

    if level is None:
        level = resolve_level(os.environ.get(LOG_LEVEL_ENV))

    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    if _handler is not None:
        package_logger.removeHandler(_handler)

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(_formatter(level))
    package_logger.addHandler(_handler)
    package_logger.setLevel(level)
    package_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, nested under the stockscan namespace.

    ``stockscan.ocr.matcher`` is kept as-is; ``scripts.import`` becomes
    ``stockscan.scripts.import``.
    """
    configure_logging()

    if name == LOGGER_NAMESPACE or name.startswith(f"{LOGGER_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def set_log_level(level: int) -> None:
    """Change the level at runtime (the CLI's ``--verbose``), switching format to match."""
    configure_logging(level)
    logging.getLogger(LOGGER_NAMESPACE).setLevel(level)
    if _handler is not None:
        _handler.setFormatter(_formatter(level))
