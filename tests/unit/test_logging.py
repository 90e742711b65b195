from __future__ import annotations

import json
import logging

from lab_metrics.utils.logging import JsonFormatter, _json_formatter, configure_logging

EXPECTED_RECORDS = 10
EXPECTED_EXCLUDED = 2


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.records = EXPECTED_RECORDS
    record.source = "sample"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["records"] == EXPECTED_RECORDS
    assert payload["source"] == "sample"
    assert "pathname" not in payload
    assert "lineno" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"excluded": EXPECTED_EXCLUDED}

    payload = json.loads(_json_formatter(record))

    assert payload["excluded"] == EXPECTED_EXCLUDED
    assert "extra" not in payload


def test_json_formatter_stringifies_unserializable_values() -> None:
    record = _record()
    record.granularities = {"week"}

    payload = json.loads(JsonFormatter().format(record))

    assert payload["granularities"] == "{'week'}"


def test_logger_extra_reaches_json_output(capsys) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level="INFO", json_logs=True)
        logging.getLogger("lab_metrics.test").info(
            "Metrics computed", extra={"records": EXPECTED_RECORDS}
        )
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    line = capsys.readouterr().err.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["message"] == "Metrics computed"
    assert payload["records"] == EXPECTED_RECORDS
