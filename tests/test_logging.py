"""Tests for logging configuration."""

import logging
import os

import pytest

from alpha_factory.logging_config import build_logging_config, setup_logging


@pytest.fixture
def restore_logging():
    yield
    setup_logging("WARNING", os.environ["LOG_FILE"])


def test_config_with_file():
    config = build_logging_config("info", "logs/app.log")

    assert set(config["handlers"]) == {"console", "file"}
    assert config["handlers"]["file"]["filename"] == "logs/app.log"
    assert config["handlers"]["console"]["level"] == "INFO"
    assert config["loggers"]["alpha_factory"] == {"level": "INFO"}
    assert config["loggers"]["httpx"]["handlers"] == ["file"]
    assert config["loggers"]["sqlalchemy.engine"]["level"] == "WARNING"


def test_config_console_only():
    config = build_logging_config("DEBUG", "")

    assert set(config["handlers"]) == {"console"}
    assert config["root"]["handlers"] == ["console"]
    assert config["loggers"]["httpx"]["handlers"] == ["console"]
    assert config["loggers"]["uvicorn"]["level"] == "DEBUG"
    assert config["loggers"]["uvicorn.access"]["level"] == "WARNING"


def test_config_sql_echo():
    config = build_logging_config("INFO", "app.log", sql_echo=True)

    assert config["loggers"]["sqlalchemy.engine"]["level"] == "INFO"


def test_setup_logging_writes_to_file(tmp_path, restore_logging):
    log_file = tmp_path / "nested" / "app.log"

    setup_logging("INFO", str(log_file))
    logging.getLogger("alpha_factory.test").info("Проверка записи в лог")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "alpha_factory.test - INFO - Проверка записи в лог" in log_file.read_text(encoding="utf-8")
