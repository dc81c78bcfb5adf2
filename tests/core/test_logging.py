from __future__ import annotations

import logging

import pytest

from app.core.logging import (
    RequestContextFilter,
    _ContainerFormatter,
    request_id_var,
    setup_logging,
)


def _record(level: int, msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="app.services.grading",
        level=level,
        pathname="grading.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.parametrize(
    ("name", "expected"),
    [("debug", logging.DEBUG), ("warning", logging.WARNING), ("bogus", logging.INFO)],
)
def test_setup_logging_sets_root_level(name: str, expected: int) -> None:
    setup_logging(name)
    assert logging.getLogger().level == expected


def test_noisy_libraries_stay_at_warning() -> None:
    setup_logging("debug")
    assert logging.getLogger("uvicorn").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    setup_logging("error")
    assert logging.getLogger("uvicorn").level == logging.ERROR


def test_setup_logging_replaces_handlers() -> None:
    setup_logging("info")
    setup_logging("info")
    assert len(logging.getLogger().handlers) == 1


def test_info_lines_have_no_location() -> None:
    output = _ContainerFormatter().format(_record(logging.INFO))
    assert "hello" in output
    assert "[grading.py:" not in output


def test_warning_lines_point_at_the_source() -> None:
    output = _ContainerFormatter().format(_record(logging.WARNING, "cache down"))
    assert "cache down" in output
    assert "[grading.py:42]" in output


def test_request_id_placeholder_outside_a_request() -> None:
    output = _ContainerFormatter().format(_record(logging.INFO))
    assert "[-]" in output


def test_request_id_shown_when_present() -> None:
    output = _ContainerFormatter().format(_record(logging.INFO, request_id="req-7"))
    assert "[req-7]" in output


def test_handler_stamps_request_id_from_context() -> None:
    setup_logging("info")
    [handler] = logging.getLogger().handlers
    assert any(isinstance(f, RequestContextFilter) for f in handler.filters)

    record = _record(logging.INFO)
    token = request_id_var.set("req-9")
    try:
        assert handler.filter(record)
    finally:
        request_id_var.reset(token)
    assert record.request_id == "req-9"  # type: ignore[attr-defined]


def test_explicit_request_id_is_not_overwritten() -> None:
    record = _record(logging.INFO, request_id="from-extra")
    RequestContextFilter().filter(record)
    assert record.request_id == "from-extra"  # type: ignore[attr-defined]
