import json
import logging
import sys

from catalog.core.logging.formatters import ColorFormatter, JsonFormatter


def make_record():
    return logging.LogRecord("catalog", logging.INFO, __file__, 10, "hello %s", ("tester",), None)


def test_json_formatter_basic_fields():
    rec = make_record()
    rec.custom = "value"
    rec.request_id = "req-1"

    data = json.loads(JsonFormatter(env="testing", service="svc").format(rec))

    assert data["message"] == "hello tester"
    assert data["level"] == "INFO"
    assert data["logger"] == "catalog"
    assert data["service"] == "svc"
    assert data["env"] == "testing"
    assert data["request_id"] == "req-1"
    assert data["custom"] == "value"
    assert "timestamp" in data
    assert "version" in data
    # standard LogRecord attributes are not repeated as extras
    assert "pathname" not in data
    assert "args" not in data


def test_json_formatter_non_serializable_extra():
    rec = make_record()

    class X:
        def __repr__(self):
            return "<X>"

    rec.obj = X()
    data = json.loads(JsonFormatter(env="dev", service="svc").format(rec))

    assert data["obj"] == "<X>"


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad value")
    except ValueError:
        rec = logging.LogRecord("catalog", logging.ERROR, __file__, 10, "failed", (), sys.exc_info())

    data = json.loads(JsonFormatter().format(rec))

    assert data["service"] == "product-catalog-api"
    assert "ValueError: bad value" in data["exc_info"]


def test_color_formatter_line_layout():
    rec = make_record()
    rec.request_id = "req-9"

    line = ColorFormatter().format(rec)

    assert "INFO" in line
    assert "req-9" in line
    assert line.endswith("hello tester")
