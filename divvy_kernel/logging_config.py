"""
Structured JSON logging for DivvyPlan.

Every logger lives under the ``divvy_kernel`` namespace (see ``get_logger``)
and, once ``configure_logging`` has run, writes one JSON object per line:

    {"ts": ..., "level": "INFO", "logger": "divvy_kernel.engines.deal",
     "message": "deal_result_computed", "command": "calc", "director_count": 2}

Per-invocation fields (correlation id and CLI command) are carried
by ``LogContext`` and added to every record emitted while they are set.
Fields passed through ``extra=`` are copied verbatim. Decimals are written
as strings so amounts keep their exact pence.
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
import threading
from contextvars import ContextVar
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

_LOGGER_PREFIX = "divvy_kernel"

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_CONTEXT_FIELDS = ("correlation_id", "command")
_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("divvy_log_context", default=_EMPTY)


def _merged(**fields: str | None) -> Mapping[str, str]:
    current = dict(_context.get())
    for name, value in fields.items():
        if name not in _CONTEXT_FIELDS:
            raise TypeError(f"Unknown log context field: {name}")
        if value is not None:
            current[name] = value
    return MappingProxyType(current)


class LogContext:
    """Per-invocation log fields, safe across threads and asyncio tasks."""

    @classmethod
    def set(
        cls,
        *,
        correlation_id: str | None = None,
        command: str | None = None,
    ) -> None:
        """Set fields; None leaves a field untouched."""
        _context.set(_merged(
            correlation_id=correlation_id,
            command=command,
        ))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)

    @classmethod
    def bind(cls, **fields: str | None) -> "_BoundContext":
        """
        Context manager setting fields for the duration of a block.

        Usage:
            with LogContext.bind(command="calc"):
                ...
        """
        return _BoundContext(fields)


class _BoundContext:
    def __init__(self, fields: dict[str, str | None]):
        self._fields = fields
        self._token = None

    def __enter__(self) -> type[LogContext]:
        self._token = _context.set(_merged(**self._fields))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        _context.reset(self._token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_RESERVED = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    """Decimals as strings, enums by value, sets sorted."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, (set, frozenset)):
            return sorted(str(v) for v in obj)
        return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # DivvyPlanError subclasses keep their data as plain attributes
    for name, value in vars(exc).items():
        if not name.startswith("_"):
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED and key not in payload
        )

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger ``divvy_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_setup_lock = threading.Lock()
_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``divvy_kernel`` logger.

    Only the first call has any effect until ``reset_logging`` is called.
    Records do not propagate to the root logger.
    """
    global _handler
    with _setup_lock:
        if _handler is not None:
            return
        _handler = handler or logging.StreamHandler(stream or sys.stderr)

    _handler.setFormatter(StructuredFormatter())
    namespace = logging.getLogger(_LOGGER_PREFIX)
    namespace.setLevel(level)
    namespace.propagate = False
    namespace.addHandler(_handler)


def reset_logging() -> None:
    """Remove every handler from the namespace logger. For tests."""
    global _handler
    with _setup_lock:
        _handler = None
    namespace = logging.getLogger(_LOGGER_PREFIX)
    namespace.handlers.clear()
    namespace.setLevel(logging.WARNING)
    namespace.propagate = True
