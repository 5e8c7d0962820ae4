"""Tests for logging setup"""

import json
import logging

from talent_analyzer.logging_config import ContextFormatter, JSONFormatter, setup_logging


def test_json_formatter_fields():
    record = logging.LogRecord(
        name="talent_analyzer.services.github",
        level=logging.WARNING,
        pathname=__file__,
        lineno=42,
        msg="Failed to fetch languages for %s",
        args=("alice/vault",),
        exc_info=None,
    )

    entry = json.loads(JSONFormatter().format(record))

    assert entry["severity"] == "WARNING"
    assert entry["message"] == "Failed to fetch languages for alice/vault"
    assert entry["logger"] == "talent_analyzer.services.github"
    assert entry["line"] == 42
    assert "exception" not in entry
    assert "context" not in entry


def make_record(**extra):
    record = logging.LogRecord(
        name="talent_analyzer.main",
        level=logging.INFO,
        pathname=__file__,
        lineno=7,
        msg="Analysis complete for alice",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_request_context():
    record = make_record(username="alice", cache="MISS", analysis_id=None, duration_ms=1234)
    entry = json.loads(JSONFormatter().format(record))
    assert entry["context"] == {"username": "alice", "cache": "MISS", "duration_ms": 1234}


def test_context_formatter_appends_pairs():
    formatter = ContextFormatter("%(message)s")
    assert formatter.format(make_record(username="alice", cache="HIT")) == (
        "Analysis complete for alice [username=alice cache=HIT]"
    )
    assert formatter.format(make_record()) == "Analysis complete for alice"


def test_setup_logging_production_uses_json():
    root = logging.getLogger()
    previous = root.handlers[:], root.level
    try:
        setup_logging("production", "warning")
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = previous[0]
        root.setLevel(previous[1])


def test_setup_logging_development_is_plain_text():
    root = logging.getLogger()
    previous = root.handlers[:], root.level
    try:
        setup_logging("development", "INFO")
        assert isinstance(root.handlers[0].formatter, ContextFormatter)
    finally:
        root.handlers[:] = previous[0]
        root.setLevel(previous[1])
