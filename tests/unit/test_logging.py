from __future__ import annotations

import json
import logging

from axion.utils.logging import JsonFormatter, _json_formatter, configure_logging

EXPECTED_PARAMS = [1, "admin"]
EXPECTED_ROWS = 3


def _record(msg: str = "select compiled") -> logging.LogRecord:
    return logging.LogRecord(
        name="axion.query.executor",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_query_extra_fields() -> None:
    record = _record()
    record.table = "users"
    record.operation = "select"
    record.params = EXPECTED_PARAMS

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "DEBUG"
    assert payload["logger"] == "axion.query.executor"
    assert payload["message"] == "select compiled"
    assert payload["table"] == "users"
    assert payload["operation"] == "select"
    assert payload["params"] == EXPECTED_PARAMS
    assert "lineno" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"rows": EXPECTED_ROWS}

    payload = json.loads(_json_formatter(record))

    assert payload["rows"] == EXPECTED_ROWS


def test_json_formatter_stringifies_unserialisable_values() -> None:
    record = _record()
    record.path = object()

    payload = json.loads(JsonFormatter().format(record))

    assert payload["path"].startswith("<object object")


def test_configure_logging_respects_force_flag() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level="warning", json_logs=True)
        handler = root.handlers[-1]
        assert isinstance(handler.formatter, JsonFormatter)
        assert root.level == logging.WARNING

        configure_logging(level="DEBUG", force=False)
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
