"""
Unit tests for structured logging utilities.
"""

import json
import logging
from io import StringIO

import pytest

from pr_reviewer.utils.logging import (
    JSONFormatter,
    get_logger,
    log_api_call,
    log_error_with_context,
    log_phase_transition,
    setup_logging,
)


@pytest.fixture
def captured_logger():
    """Context logger whose records are captured as JSON lines."""
    logger = get_logger("test_capture")
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())
    logger.logger.addHandler(handler)
    logger.logger.setLevel(logging.DEBUG)
    yield logger, stream
    logger.logger.removeHandler(handler)


def _last_record(stream):
    return json.loads(stream.getvalue().strip().splitlines()[-1])


def test_json_formatter(captured_logger):
    """Test JSON formatter produces valid JSON output."""
    logger, stream = captured_logger

    logger.info("Test message", extra={"pr_number": 7, "phase": "analyze", "hunks": 3})

    log_data = _last_record(stream)
    assert "timestamp" in log_data
    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test_capture"
    assert log_data["message"] == "Test message"
    assert log_data["pr_number"] == 7
    assert log_data["phase"] == "analyze"
    assert log_data["context"] == {"hunks": 3}
    assert "source" in log_data


def test_get_logger_with_context():
    """Test getting logger with context."""
    logger = get_logger("test_module", pr_number=7, repository="octo/hello")

    assert logger.extra["pr_number"] == 7
    assert logger.extra["repository"] == "octo/hello"


def test_with_context_merges_fields(captured_logger):
    logger, stream = captured_logger

    logger.with_context(repository="octo/hello").info("scoped")

    assert _last_record(stream)["repository"] == "octo/hello"
    assert "repository" not in logger.extra


def test_log_phase_transition(captured_logger):
    """Test phase transition logging."""
    logger, stream = captured_logger

    log_phase_transition(logger, pr_number=7, phase="retrieve_diff", status="started")

    log_data = _last_record(stream)
    assert log_data["pr_number"] == 7
    assert log_data["phase"] == "retrieve_diff"
    assert log_data["context"]["status"] == "started"


def test_log_api_call(captured_logger):
    """Test API call logging."""
    logger, stream = captured_logger

    log_api_call(logger, service="github", endpoint="/repos/octo/hello/pulls/7", method="GET",
                 status_code=200, duration_ms=150.456)

    log_data = _last_record(stream)
    assert log_data["level"] == "INFO"
    assert log_data["context"]["service"] == "github"
    assert log_data["context"]["status_code"] == 200
    assert log_data["context"]["duration_ms"] == 150.46


def test_log_api_call_with_error(captured_logger):
    """Test API call logging with error."""
    logger, stream = captured_logger

    log_api_call(logger, service="openai", endpoint="chat.completions", method="POST", error="Connection timeout")

    log_data = _last_record(stream)
    assert log_data["level"] == "ERROR"
    assert log_data["context"]["error"] == "Connection timeout"


def test_log_error_with_context(captured_logger):
    logger, stream = captured_logger

    try:
        raise ValueError("boom")
    except ValueError as e:
        log_error_with_context(logger, "Review run failed", e, pr_number=7)

    log_data = _last_record(stream)
    assert log_data["level"] == "ERROR"
    assert log_data["pr_number"] == 7
    assert log_data["error"]["type"] == "ValueError"
    assert "boom" in log_data["error"]["stack_trace"]


def test_setup_logging_installs_json_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("WARNING")

        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
