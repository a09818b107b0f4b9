from __future__ import annotations

import json
import logging

from subquery_demo.utils.logging import _json_formatter, configure_logging

EXPECTED_ROWS = 5


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.rows = EXPECTED_ROWS
    record.scenario = "OrderCountPerEmployee"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["rows"] == EXPECTED_ROWS
    assert payload["scenario"] == "OrderCountPerEmployee"
    assert "pathname" not in payload


def test_json_formatter_keeps_an_extra_attribute_nested() -> None:
    record = _record()
    record.extra = {"dialect": "sqlite"}

    payload = json.loads(_json_formatter(record))

    assert payload["extra"] == {"dialect": "sqlite"}
    assert "dialect" not in payload


def test_json_formatter_stringifies_unserializable_values() -> None:
    record = _record()
    record.path = object()

    payload = json.loads(_json_formatter(record))

    assert payload["path"].startswith("<object object")


def test_configure_logging_sets_root_level() -> None:
    configure_logging(level="warning")

    assert logging.getLogger().level == logging.WARNING
    configure_logging(level="INFO")
