# ruff: noqa: INP001
"""Tests for text and JSON log formatting."""

from __future__ import annotations

import json
import logging
import sys

from crm_backend.core.logging import JsonFormatter, KeyValueFormatter, build_formatter


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="crm_backend.services.priority.engine",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="priority.recalc.user_completed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_text_formatter_appends_sorted_extras() -> None:
    formatter = KeyValueFormatter("%(levelname)s %(message)s")

    line = formatter.format(_record(user_id="u-1", failures=0))

    assert line == "INFO priority.recalc.user_completed failures=0 user_id=u-1"


def test_text_formatter_without_extras_is_plain() -> None:
    formatter = KeyValueFormatter("%(message)s")

    assert formatter.format(_record()) == "priority.recalc.user_completed"


def test_json_formatter_merges_extras_as_fields() -> None:
    payload = json.loads(JsonFormatter(use_utc=True).format(_record(tasks_updated=4)))

    assert payload["message"] == "priority.recalc.user_completed"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "crm_backend.services.priority.engine"
    assert payload["tasks_updated"] == 4
    assert payload["timestamp"].endswith("+00:00")


def test_json_formatter_includes_exception_text() -> None:
    try:
        raise ValueError("bad snapshot")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()

    payload = json.loads(JsonFormatter().format(record))

    assert "ValueError: bad snapshot" in payload["exc_info"]


def test_build_formatter_selects_by_name() -> None:
    assert isinstance(build_formatter("json", use_utc=False), JsonFormatter)
    assert isinstance(build_formatter("text", use_utc=True), KeyValueFormatter)
