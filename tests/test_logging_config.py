import io
import logging
import re

import pytest

from app.config import get_keywords_path, get_port, get_rules_path
from app.logging_config import setup_logging
from app.main import create_app


@pytest.fixture
def log_stream():
    """StringIO stream for capturing log output."""
    return io.StringIO()


@pytest.fixture(autouse=True)
def reset_logging_for_test(monkeypatch):
    root_logger = logging.getLogger()
    saved_level = root_logger.level
    saved_handlers = root_logger.handlers[:]
    for h in saved_handlers:
        root_logger.removeHandler(h)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    yield

    for h in root_logger.handlers[:]:
        root_logger.removeHandler(h)
        h.close()
    for h in saved_handlers:
        root_logger.addHandler(h)
    root_logger.setLevel(saved_level)


def test_log_message_formatting(monkeypatch, log_stream):
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    setup_logging(stream=log_stream)

    logging.getLogger("format_test_logger").info("A test formatting message.")

    log_pattern = (
        r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2},\d{3} - format_test_logger - INFO - "
        r"test_logging_config:test_log_message_formatting:\d+ - A test formatting message.\s*\n?$"
    )
    assert re.match(log_pattern, log_stream.getvalue()) is not None


def test_log_level_info_hides_debug(monkeypatch, log_stream):
    monkeypatch.setenv("LOG_LEVEL", "info")
    setup_logging(stream=log_stream)

    logger = logging.getLogger("level_test_logger_info")
    logger.setLevel(logging.DEBUG)
    logger.debug("This debug message should NOT appear.")
    logger.info("This info message should appear.")

    output = log_stream.getvalue()
    assert "should NOT appear" not in output
    assert "This info message should appear." in output


def test_log_level_debug(monkeypatch, log_stream):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    setup_logging(stream=log_stream)

    logging.getLogger("basic_porter.porting.pipeline").debug("Running gosub pass")
    assert "Running gosub pass" in log_stream.getvalue()


def test_unknown_level_falls_back_to_info(monkeypatch, log_stream):
    monkeypatch.setenv("LOG_LEVEL", "CHATTY")
    setup_logging(stream=log_stream)
    assert logging.getLogger().level == logging.INFO


def test_repeated_setup_keeps_one_handler(log_stream):
    setup_logging(stream=log_stream)
    setup_logging(stream=log_stream)
    assert len(logging.getLogger().handlers) == 1


def test_config_getters(monkeypatch, tmp_path):
    monkeypatch.setenv("PORT", "not-a-number")
    assert get_port() == 8000
    monkeypatch.setenv("BASIC_PORTER_RULES_PATH", str(tmp_path / "rules.json"))
    monkeypatch.delenv("BASIC_PORTER_KEYWORDS_PATH", raising=False)
    assert get_rules_path() == tmp_path / "rules.json"
    assert get_keywords_path() is None


def test_create_app_configures_logging(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    create_app()
    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG
    assert len(root_logger.handlers) == 1
