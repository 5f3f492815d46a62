import json
import logging
import sys

from aqio.core.logging.formatters import JsonFormatter


def make_record():
    return logging.LogRecord("aqio", logging.INFO, __file__, 10, "hello %s", ("tester",), None)


def test_json_formatter_basic_fields():
    rec = make_record()
    rec.custom = "value"  # simulates extra={...}
    rec.request_id = "req-1"
    data = json.loads(JsonFormatter(env="testing", service="svc").format(rec))
    assert data["message"] == "hello tester"
    assert data["level"] == "INFO"
    assert data["logger"] == "aqio"
    assert data["service"] == "svc"
    assert data["env"] == "testing"
    assert "timestamp" in data
    assert data["request_id"] == "req-1"
    assert data["custom"] == "value"
    assert "version" in data


def test_json_formatter_non_serializable_extra():
    rec = make_record()

    class X:
        def __repr__(self):
            return "<X>"

    rec.obj = X()
    data = json.loads(JsonFormatter(env="dev", service="svc").format(rec))
    assert isinstance(data["obj"], str)


def test_json_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        rec = logging.LogRecord("aqio", logging.ERROR, __file__, 10, "failed", (), sys.exc_info())
    data = json.loads(JsonFormatter(env="dev").format(rec))
    assert "ValueError: boom" in data["exc_info"]
