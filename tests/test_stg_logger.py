"""
Tests for logging setup.
"""

import logging
import sys
from unittest.mock import patch

from stg_logger import AZURE_LOGGERS, setup_logging


@patch("stg_logger.logging.basicConfig")
def test_setup_logging_levels(mock_basic_config, monkeypatch, tmp_path):
    monkeypatch.setenv("STORAGE_AUTH_LOG_LEVEL", "debug")
    monkeypatch.setenv("AZURE_LOG_LEVEL", "error")

    setup_logging(str(tmp_path / "storage_auth.log"))

    kwargs = mock_basic_config.call_args.kwargs
    assert kwargs["level"] == logging.DEBUG
    assert len(kwargs["handlers"]) == 2
    for handler in kwargs["handlers"]:
        handler.close()
    for logger_name in AZURE_LOGGERS:
        assert logging.getLogger(logger_name).level == logging.ERROR


@patch("stg_logger.logging.basicConfig")
def test_setup_logging_defaults(mock_basic_config, monkeypatch, tmp_path):
    monkeypatch.delenv("STORAGE_AUTH_LOG_LEVEL", raising=False)
    monkeypatch.delenv("AZURE_LOG_LEVEL", raising=False)
    monkeypatch.setenv("STORAGE_AUTH_LOG_FILE", str(tmp_path / "default.log"))

    setup_logging()

    kwargs = mock_basic_config.call_args.kwargs
    assert kwargs["level"] == logging.WARNING
    assert kwargs["handlers"][1].baseFilename == str(tmp_path / "default.log")
    for handler in kwargs["handlers"]:
        handler.close()
    assert logging.getLogger("azure.identity").level == logging.WARNING


@patch("stg_logger.logging.basicConfig")
def test_console_records_go_to_stderr(mock_basic_config, monkeypatch, tmp_path):
    monkeypatch.setenv("STORAGE_AUTH_LOG_FILE", str(tmp_path / "storage_auth.log"))

    setup_logging()

    console_handler = mock_basic_config.call_args.kwargs["handlers"][0]
    assert console_handler.stream is sys.stderr
    for handler in mock_basic_config.call_args.kwargs["handlers"]:
        handler.close()
