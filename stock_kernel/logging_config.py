"""
Structured JSON logging for the stock kernel.

Every record under the ``stock_kernel`` logger becomes one JSON line:

    {"ts": ..., "level": "INFO", "logger": "stock_kernel.services.stock_ledger",
     "message": "movement_recorded", "request_id": "...", "product_id": "7",
     "movement_id": "42", "quantity": 3, ...}

Which request, product and ledger row a line belongs to is carried by
LogContext, so call sites only pass what is specific to the event.  Errors
from the kernel hierarchy are rendered under ``error`` with their code and
structured attributes.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from typing import Any

_LOGGER_PREFIX = "stock_kernel"


class LogContext:
    """
    Request-scoped log fields, safe across threads and async tasks.

    Fields:
        request_id: HTTP request, bound by the API middleware.
        product_id: Product being moved, bound per movement.
        movement_id: Ledger row, bound once the movement is committed.
    """

    _vars: dict[str, ContextVar[str | None]] = {
        name: ContextVar(f"stock_log_{name}", default=None)
        for name in ("request_id", "product_id", "movement_id")
    }

    @classmethod
    @contextmanager
    def bind(cls, **fields: object) -> Iterator[None]:
        """Set fields for the duration of the block; None values are skipped."""
        unknown = set(fields) - set(cls._vars)
        if unknown:
            raise TypeError(f"unknown log context field: {sorted(unknown)[0]}")
        tokens = [
            (cls._vars[name], cls._vars[name].set(str(value)))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)

    @classmethod
    def current(cls) -> dict[str, str]:
        """The bound fields, without the unset ones."""
        return {
            name: value
            for name, var in cls._vars.items()
            if (value := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in cls._vars.values():
            var.set(None)


# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> str:
    # Decimal prices stay exact as strings
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _describe_error(exc: BaseException) -> dict[str, Any]:
    error: dict[str, Any] = {"type": type(exc).__name__, "message": str(exc)}
    code = getattr(exc, "code", None)
    if code is not None:
        error["code"] = code
        # product_id, requested, available, field, ...
        error.update(
            (key, value) for key, value in vars(exc).items() if not key.startswith("_")
        )
    return error


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: header, context, extras, then any error."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.current(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload["error"] = _describe_error(record.exc_info[1])
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


def get_logger(name: str) -> logging.Logger:
    """Logger for a kernel component, e.g. ``get_logger("services.catalog")``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_installed: logging.Handler | None = None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Send ``stock_kernel`` records to ``handler`` (or a stream handler on
    ``stream``, stderr by default) as JSON lines.

    Only the first call takes effect until ``reset_logging()``.
    """
    global _installed
    if _installed is not None:
        return

    _installed = handler or logging.StreamHandler(stream or sys.stderr)
    _installed.setFormatter(StructuredFormatter())

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False
    root.addHandler(_installed)


def reset_logging() -> None:
    """Remove the handler installed by ``configure_logging``. Used by tests."""
    global _installed
    root = logging.getLogger(_LOGGER_PREFIX)
    if _installed is not None:
        root.removeHandler(_installed)
        _installed = None
    root.setLevel(logging.WARNING)
