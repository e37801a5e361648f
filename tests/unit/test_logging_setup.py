"""
Tests for structlog configuration.
"""

import json
import logging

import pytest
import structlog

from tinymonitor.config import MonitoringConfig
from tinymonitor.observability import configure_logging
from tinymonitor.observability.logging import add_correlation_id


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.mark.unit
def test_correlation_id_added_from_context():
    structlog.contextvars.bind_contextvars(correlation_id="abc")
    try:
        event = add_correlation_id(None, "info", {"event": "x"})
    finally:
        structlog.contextvars.clear_contextvars()

    assert event["correlation_id"] == "abc"


@pytest.mark.unit
def test_correlation_id_absent_without_context():
    assert "correlation_id" not in add_correlation_id(None, "info", {"event": "x"})


@pytest.mark.unit
def test_file_logging_writes_json(tmp_path, restore_logging):
    log_file = tmp_path / "gateway.log"
    configure_logging(MonitoringConfig(log_file=str(log_file), log_level="DEBUG"))

    structlog.contextvars.bind_contextvars(correlation_id="req-1")
    structlog.get_logger("tinymonitor.test").info("Reading served", state="ON")
    for handler in logging.getLogger().handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_file.read_text().splitlines()]
    served = [line for line in lines if line["event"] == "Reading served"]
    assert served[0]["state"] == "ON"
    assert served[0]["correlation_id"] == "req-1"
    assert served[0]["level"] == "info"
    assert "timestamp" in served[0]


@pytest.mark.unit
def test_stdlib_records_share_renderer(tmp_path, restore_logging):
    log_file = tmp_path / "gateway.log"
    configure_logging(MonitoringConfig(log_file=str(log_file)))

    logging.getLogger("uvicorn.error").warning("port %d busy", 7270)
    for handler in logging.getLogger().handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert any(line["event"] == "port 7270 busy" and line["level"] == "warning" for line in lines)


@pytest.mark.unit
def test_level_applied(restore_logging):
    configure_logging(MonitoringConfig(log_level="WARNING", log_format="json"))
    assert logging.getLogger().level == logging.WARNING
