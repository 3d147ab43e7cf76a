"""Tests for the logging setup."""

import logging
from dataclasses import dataclass

import pytest

from fluentmap import entity_map
from fluentmap.logging_config import DEFAULT_LOG_LEVEL, setup_logging


@pytest.fixture
def fluentmap_logger():
    logger = logging.getLogger("fluentmap")
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def test_setup_logging_with_int_level(fluentmap_logger: logging.Logger):
    setup_logging(logging.DEBUG)
    assert fluentmap_logger.level == logging.DEBUG


def test_setup_logging_with_level_name(fluentmap_logger: logging.Logger):
    setup_logging("info")
    assert fluentmap_logger.level == logging.INFO


def test_setup_logging_reads_environment(fluentmap_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FLUENTMAP_LOG_LEVEL", "ERROR")
    setup_logging()
    assert fluentmap_logger.level == logging.ERROR


def test_setup_logging_defaults_without_environment(fluentmap_logger: logging.Logger):
    setup_logging()
    assert fluentmap_logger.level == DEFAULT_LOG_LEVEL


def test_invalid_level_name_warns_and_defaults(fluentmap_logger: logging.Logger, capsys: pytest.CaptureFixture[str]):
    """An unknown level name falls back to the default and says so on stderr."""
    setup_logging("LOUD")
    assert fluentmap_logger.level == DEFAULT_LOG_LEVEL
    assert "Invalid log level string 'LOUD'" in capsys.readouterr().err


def test_repeated_setup_keeps_a_single_handler(fluentmap_logger: logging.Logger):
    setup_logging("DEBUG")
    setup_logging("WARNING")
    assert len(fluentmap_logger.handlers) == 1
    assert fluentmap_logger.level == logging.WARNING


def test_debug_records_from_mapping_are_emitted(fluentmap_logger: logging.Logger, caplog: pytest.LogCaptureFixture):
    """Mapping a property logs a DEBUG record on the fluentmap logger tree."""

    @dataclass
    class Tag:
        label: str

    with caplog.at_level(logging.DEBUG, logger="fluentmap"):
        entity_map(Tag, lambda m: m.map(lambda t: t.label))

    assert any("Mapped property Tag.label" in record.getMessage() for record in caplog.records)
