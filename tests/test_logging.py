"""Logging setup tests."""

import json
import logging

import pytest

from accounts.shared.utils import logging as accounts_logging
from accounts.shared.utils.logging import (
    ContextualFormatter,
    JSONFormatter,
    TEXT_FORMAT,
    correlation_id_var,
    log_context,
    setup_logging,
)


def make_record(message="Created user with ID: 1"):
    return logging.LogRecord(
        "accounts.repository", logging.INFO, __file__, 1, message, None, None
    )


def test_json_formatter_fields():
    output = json.loads(JSONFormatter().format(make_record()))

    assert output["message"] == "Created user with ID: 1"
    assert output["levelname"] == "INFO"
    assert output["name"] == "accounts.repository"
    assert output["service"] == "accounts"
    assert "timestamp" in output
    assert "correlation_id" not in output


def test_json_formatter_includes_correlation_id():
    with log_context("req-123") as correlation_id:
        output = json.loads(JSONFormatter().format(make_record()))

    assert correlation_id == "req-123"
    assert output["correlation_id"] == "req-123"


def test_log_context_generates_and_resets_id():
    with log_context() as correlation_id:
        assert correlation_id
        assert correlation_id_var.get() == correlation_id

    assert correlation_id_var.get() == ""


def test_text_formatter():
    with log_context("req-456"):
        line = ContextualFormatter(TEXT_FORMAT + " [%(correlation_id)s]").format(make_record())

    assert "accounts.repository - INFO - Created user with ID: 1 [req-456]" in line


@pytest.fixture
def clean_root_logger(monkeypatch):
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    monkeypatch.setattr(accounts_logging, "_logging_configured", False)
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_configures_once(clean_root_logger):
    logger = setup_logging(log_level="warning", log_format="json")

    assert logger.name == "accounts"
    assert clean_root_logger.level == logging.WARNING
    assert len(clean_root_logger.handlers) == 1
    assert isinstance(clean_root_logger.handlers[0].formatter, JSONFormatter)

    setup_logging(log_level="debug", log_format="text")
    assert clean_root_logger.level == logging.WARNING
