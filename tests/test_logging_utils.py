"""Structured logging helper tests."""

from __future__ import annotations

import json
import logging

import pytest

from DataLakeStore.logging_utils import (
    ROOT_LOGGER_NAME,
    JSONFormatter,
    mask_sensitive_data,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    level, handlers = logger.level, list(logger.handlers)
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


def test_mask_sensitive_data():
    masked = mask_sensitive_data(
        {
            "client_secret": "s",
            "Password": "p",
            "Authorization": "Bearer abc",
            "header": "bearer xyz",
            "grant_type": "password",
        }
    )

    assert masked == {
        "client_secret": "***masked***",
        "Password": "***masked***",
        "Authorization": "***masked***",
        "header": "***masked***",
        "grant_type": "password",
    }


def test_json_formatter_includes_context_and_masks():
    record = logging.LogRecord(
        "DataLakeStore.transport.orchestrator", logging.DEBUG, __file__, 1, "HTTPRequest,%s", ("Succeeded",), None
    )
    record.client_request_id = "corr.0"
    record.operation = "OPEN"
    record.extra_fields = {"access_token": "abc", "path": "/a"}

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "HTTPRequest,Succeeded"
    assert payload["level"] == "DEBUG"
    assert payload["client_request_id"] == "corr.0"
    assert payload["operation"] == "OPEN"
    assert payload["path"] == "/a"
    assert payload["access_token"] == "***masked***"
    assert payload["timestamp"].endswith("Z")


def test_setup_logging_replaces_managed_handler(restore_root_logger):
    logger = setup_logging("DEBUG")
    setup_logging("WARNING", json_lines=True)

    managed = [h for h in logger.handlers if getattr(h, "_datalakestore_managed", False)]
    assert len(managed) == 1
    assert isinstance(managed[0].formatter, JSONFormatter)
    assert logger.level == logging.WARNING


def test_setup_logging_defaults_to_settings(restore_root_logger, monkeypatch):
    monkeypatch.setenv("DATALAKESTORE_LOG_LEVEL", "ERROR")

    logger = setup_logging()

    assert logger.level == logging.ERROR
