"""Tests for the root logging setup."""

import json
import logging
import pytest
from pythonjsonlogger.json import JsonFormatter
from src.utils.logging_config import LoggingConfig, QUIET_LOGGERS


@pytest.fixture
def root_logger(monkeypatch):
    """Root logger whose handlers and level are restored after the test."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    monkeypatch.setattr(LoggingConfig, "_configured", False)
    yield root
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def _record(message="Task created"):
    return logging.LogRecord("crm", logging.INFO, __file__, 1, message, None, None)


@pytest.mark.unit
def test_build_formatter_json_renames_level(monkeypatch):
    monkeypatch.setattr(LoggingConfig, "LOG_FORMAT", "json")

    formatter = LoggingConfig.build_formatter()
    output = json.loads(formatter.format(_record()))

    assert isinstance(formatter, JsonFormatter)
    assert output["level"] == "INFO"
    assert "levelname" not in output
    assert output["name"] == "crm"
    assert output["message"] == "Task created"
    assert "timestamp" in output


@pytest.mark.unit
def test_build_formatter_text(monkeypatch):
    monkeypatch.setattr(LoggingConfig, "LOG_FORMAT", "text")

    formatter = LoggingConfig.build_formatter()

    assert not isinstance(formatter, JsonFormatter)
    assert formatter.format(_record()).endswith("crm - INFO - Task created")


@pytest.mark.unit
@pytest.mark.parametrize("name,expected", [
    ("DEBUG", logging.DEBUG),
    ("WARNING", logging.WARNING),
    ("NOPE", logging.INFO),
])
def test_level_from_name(monkeypatch, name, expected):
    monkeypatch.setattr(LoggingConfig, "LOG_LEVEL", name)

    assert LoggingConfig.level() == expected


@pytest.mark.unit
def test_setup_logging_installs_single_stdout_handler(root_logger, monkeypatch):
    monkeypatch.setattr(LoggingConfig, "LOG_LEVEL", "DEBUG")
    root_logger.addHandler(logging.NullHandler())

    LoggingConfig.setup_logging()

    assert len(root_logger.handlers) == 1
    assert isinstance(root_logger.handlers[0], logging.StreamHandler)
    assert root_logger.level == logging.DEBUG
    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


@pytest.mark.unit
def test_setup_logging_runs_once_unless_forced(root_logger):
    LoggingConfig.setup_logging()
    first = root_logger.handlers[0]

    LoggingConfig.setup_logging()
    assert root_logger.handlers == [first]

    LoggingConfig.setup_logging(force=True)
    assert len(root_logger.handlers) == 1
    assert root_logger.handlers[0] is not first
