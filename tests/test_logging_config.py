"""
Tests for logging setup.
"""

import json
import logging

from core.logging_config import HumanFormatter, JSONFormatter, setup_logging


def _record(msg="resolved", **extra):
    record = logging.LogRecord("core.services.resolver", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    line = JSONFormatter().format(_record(url="https://k02.mbdny.org/a.jpg", attempt=3))
    data = json.loads(line)

    assert data["level"] == "INFO"
    assert data["logger"] == "core.services.resolver"
    assert data["message"] == "resolved"
    assert data["url"] == "https://k02.mbdny.org/a.jpg"
    assert data["attempt"] == 3


def test_human_formatter_uses_short_module_name():
    line = HumanFormatter().format(_record())

    assert "[resolver" in line
    assert line.endswith("resolved")


def test_setup_logging_configures_root():
    setup_logging("debug", "json")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JSONFormatter)
    assert logging.getLogger("httpx").level == logging.WARNING
