from __future__ import annotations

import logging

import pytest

from hostdni.logger import HostsLogFormatter, get_logger, redact


def _record(event: str, message: str, **fields) -> logging.LogRecord:
    record = logging.LogRecord("hostdni", logging.INFO, __file__, 1, message, None, None)
    record.category = "runtime"
    record.event = event
    record.fields = fields
    return record


def test_token_fields_are_redacted() -> None:
    line = HostsLogFormatter().format(
        _record("runtime.tokens.rotate", "API token rotated", token="AbCdEfGhIjKlMnOpQrStUvWxYz012345")
    )

    assert "AbCdEfGh" not in line
    assert "token: AbCd***" in line
    assert "| runtime | (*) runtime.tokens.rotate | API token rotated |" in line


def test_step_lines_show_step_name() -> None:
    line = HostsLogFormatter().format(_record("operation.step", "Prepared backup slot", step="backup", backed_up=True))

    assert "(*) >> backup | Prepared backup slot | backed_up: True" in line


@pytest.mark.parametrize(("value", "expected"), [(None, "***"), ("abc", "***"), ("abcdef", "abcd***")])
def test_redact(value, expected) -> None:
    assert redact(value) == expected


class _Collect(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def test_operation_logs_failure_and_reraises() -> None:
    handler = _Collect()
    target = logging.getLogger("hostdni")
    target.addHandler(handler)
    previous = target.level
    target.setLevel(logging.DEBUG)
    try:
        with pytest.raises(OSError):
            with get_logger("tests").operation("hosts.write", "Rewriting hosts file", records=2):
                raise OSError("disk full")
    finally:
        target.removeHandler(handler)
        target.setLevel(previous)

    events = [record.event for record in handler.records]
    assert events == ["operation.start", "operation.error"]
    assert handler.records[-1].levelno == logging.WARNING
    assert handler.records[-1].fields["error_type"] == "OSError"
