"""Structured, single-line logging for the hosts service.

Every call names an event (`hosts.write`, `auth.reject`, ...) plus free-form
fields. Output looks like

    2026-01-05 10:00:00.123 | INFO     | services.hosts.writer | (*) hosts.backup | Backed up hosts file | source: /etc/hosts

Bearer tokens never reach a handler in clear text; see `SECRET_FIELDS`.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from time import perf_counter
from types import TracebackType
from typing import Any, Dict, Iterator, List, Mapping, Optional

LOGGER_NAME = "hostdni"
SECRET_FIELDS = frozenset({"token", "previous_token", "authorization"})

_SYMBOLS = {
    logging.DEBUG: "(?)",
    logging.INFO: "(*)",
    logging.WARNING: "(!)",
    logging.ERROR: "(x)",
    logging.CRITICAL: "(X)",
}
_STEP_EVENT = "operation.step"

_request_fields: ContextVar[Dict[str, Any]] = ContextVar("hostdni_log_fields", default={})


def redact(value: Any, keep: int = 4) -> str:
    text = str(value or "")
    if len(text) <= keep:
        return "***"
    return text[:keep] + "***"


class HostsLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        symbol = _SYMBOLS.get(record.levelno, "(?)")
        event = getattr(record, "event", "")
        fields = dict(getattr(record, "fields", {}))
        message = record.getMessage()

        columns = [
            created.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3],
            f"{record.levelname:<8}",
            getattr(record, "category", record.name),
        ]
        if event == _STEP_EVENT:
            columns.append(f"{symbol} >> {fields.pop('step', 'step')}")
        elif event:
            columns.append(f"{symbol} {event}")
        if message:
            columns.append(message if event else f"{symbol} {message}")

        columns.extend(
            f"{key}: {redact(value) if key in SECRET_FIELDS else value}"
            for key, value in fields.items()
        )
        line = " | ".join(columns)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class Operation:
    """Brackets a multi-step hosts change with start/complete/error lines.

    Failures are logged at WARNING without a traceback; the caller decides
    whether the exception is worth more than that.
    """

    def __init__(self, logger: "BoundLogger", name: str, message: str, fields: Dict[str, Any]) -> None:
        self.logger = logger
        self.name = name
        self.message = message
        self.fields = fields
        self._started = 0.0

    def __enter__(self) -> "Operation":
        self._started = perf_counter()
        self.logger.info("operation.start", self.message, operation=self.name, **self.fields)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        elapsed = round((perf_counter() - self._started) * 1000, 1)
        if exc_type is None:
            self.logger.info("operation.complete", "Completed", operation=self.name, duration_ms=elapsed)
            return
        self.logger.warning(
            "operation.error",
            str(exc) if exc is not None else "Failed",
            operation=self.name,
            duration_ms=elapsed,
            error_type=exc_type.__name__,
        )

    def step(self, name: str, message: str, **fields: Any) -> None:
        self.logger.info(_STEP_EVENT, message, operation=self.name, step=name, **fields)


class BoundLogger:
    def __init__(self, category: str) -> None:
        self._category = category

    @contextmanager
    def context(self, **fields: Any) -> Iterator[None]:
        """Attach `fields` to every line logged in this task until the block exits."""
        token = _request_fields.set({**_request_fields.get(), **fields})
        try:
            yield
        finally:
            _request_fields.reset(token)

    def operation(self, name: str, message: str, **fields: Any) -> Operation:
        return Operation(self, name, message, fields)

    def debug(self, event: str, message: str, **fields: Any) -> None:
        self._emit(logging.DEBUG, event, message, fields)

    def info(self, event: str, message: str, **fields: Any) -> None:
        self._emit(logging.INFO, event, message, fields)

    def warning(self, event: str, message: str, **fields: Any) -> None:
        self._emit(logging.WARNING, event, message, fields)

    def error(self, event: str, message: str, **fields: Any) -> None:
        self._emit(logging.ERROR, event, message, fields)

    def exception(self, event: str, message: str, **fields: Any) -> None:
        self._emit(logging.ERROR, event, message, fields, exc_info=True)

    def _emit(
        self,
        level: int,
        event: str,
        message: str,
        fields: Mapping[str, Any],
        exc_info: bool = False,
    ) -> None:
        logging.getLogger(LOGGER_NAME).log(
            level,
            message,
            extra={
                "category": self._category,
                "event": event,
                "fields": {**_request_fields.get(), **fields},
            },
            exc_info=exc_info,
        )


def _handlers(log_file: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    formatter = HostsLogFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(log_level: str, log_file: Optional[str] = None) -> None:
    """Route the service logger and uvicorn through one formatter.

    Safe to call more than once; handlers are replaced, not stacked.
    """
    handlers = _handlers(log_file)

    for target in (logging.getLogger(), logging.getLogger(LOGGER_NAME)):
        target.setLevel(log_level.upper())
        target.handlers[:] = handlers
    logging.getLogger(LOGGER_NAME).propagate = False

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers.clear()
        logging.getLogger(name).propagate = True


def get_logger(category: str) -> BoundLogger:
    return BoundLogger(category)
