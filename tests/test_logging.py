"""Tests for the stockscan logger namespace."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from stockscan.cli.main import main
from stockscan.runtime import logging as logging_module
from stockscan.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    LOGGER_NAMESPACE,
    configure_logging,
    get_logger,
    resolve_level,
    set_log_level,
)


@pytest.fixture
def restore_level() -> Iterator[None]:
    previous = logging.getLogger(LOGGER_NAMESPACE).level
    yield
    set_log_level(previous)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("debug", logging.DEBUG),
        (" WARN ", logging.WARNING),
        ("error", logging.ERROR),
        ("15", 15),
        ("", DEFAULT_LOG_LEVEL),
        (None, DEFAULT_LOG_LEVEL),
        ("chatty", DEFAULT_LOG_LEVEL),
    ],
)
def test_resolve_level(value: str | None, expected: int) -> None:
    assert resolve_level(value) == expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("stockscan.ocr.matcher", "stockscan.ocr.matcher"),
        ("stockscan", "stockscan"),
        ("scripts.import_catalog", "stockscan.scripts.import_catalog"),
        ("stockscanner", "stockscan.stockscanner"),
    ],
)
def test_get_logger_nests_under_namespace(name: str, expected: str) -> None:
    assert get_logger(name).name == expected


def test_reconfiguring_replaces_the_handler(restore_level: None) -> None:
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    before = len(package_logger.handlers)

    configure_logging(logging.WARNING, force=True)
    configure_logging(logging.INFO, force=True)
    configure_logging(logging.ERROR)

    assert len(package_logger.handlers) == before
    assert package_logger.level == logging.INFO
    assert package_logger.propagate is False


def test_set_log_level_switches_format(restore_level: None) -> None:
    set_log_level(logging.DEBUG)

    assert logging.getLogger(LOGGER_NAMESPACE).level == logging.DEBUG
    assert logging_module._handler is not None
    assert logging_module._handler.formatter._fmt == LOG_FORMAT_DEBUG

    set_log_level(logging.WARNING)

    assert logging_module._handler.formatter._fmt == LOG_FORMAT


def test_verbose_flag_enables_debug(restore_level: None) -> None:
    assert main(["--verbose"]) == 1

    assert logging.getLogger(LOGGER_NAMESPACE).level == logging.DEBUG
