"""Structured Logging — JSON formatter and handler setup.

Tests:
    - JSON lines carry level, logger, message and present extra fields only
    - Exceptions are serialized
    - setup_logging is idempotent and targets stderr
"""

import json
import logging
import sys

import pytest

from parallels_bridge.infrastructure.observability import JSONFormatter, setup_logging


def test_json_formatter_extra_fields():
    record = logging.makeLogRecord({
        "name": "parallels_bridge.test",
        "levelname": "INFO",
        "msg": "prlctl completed",
        "argv": ["list", "--all"],
        "exit_code": 0,
    })
    payload = json.loads(JSONFormatter().format(record))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "parallels_bridge.test"
    assert payload["message"] == "prlctl completed"
    assert payload["argv"] == ["list", "--all"]
    assert payload["exit_code"] == 0
    assert "tool_name" not in payload


def test_json_formatter_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.makeLogRecord({"msg": "failed", "exc_info": sys.exc_info()})
    payload = json.loads(JSONFormatter().format(record))
    assert "ValueError: boom" in payload["exception"]


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


def test_setup_logging_replaces_own_handler(restore_root_logger):
    setup_logging("DEBUG", "json")
    setup_logging("WARNING", "text")
    ours = [h for h in restore_root_logger.handlers if h.get_name() == "parallels_bridge"]
    assert len(ours) == 1
    assert ours[0].stream is sys.stderr
    assert not isinstance(ours[0].formatter, JSONFormatter)
    assert restore_root_logger.level == logging.WARNING
