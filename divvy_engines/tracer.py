"""
divvy_engines.tracer -- DIVVY_ENGINE_TRACE records for engine calls.

Responsibility:
    ``@traced_engine`` wraps a pure engine function and, after each call,
    logs which engine ran, its version, how long it took and a fingerprint
    of the inputs that determine its result.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Logs only; inputs and results pass through untouched.

Invariants enforced:
    - The fingerprint is the first 16 hex digits of a SHA-256 over a
      canonical JSON document: dataclasses become objects of their fields,
      Decimals their string form, enums their value, sets sorted lists.
      Equal inputs therefore always fingerprint the same.
    - Arguments are bound against the wrapped signature, so passing a
      field positionally or by keyword makes no difference.

Usage:
    @traced_engine("breakdown", "1.1", fingerprint_fields=("deal", "settings"))
    def compute_breakdown(deal, settings):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import json
import time
from collections.abc import Callable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

from divvy_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_TYPE = "DIVVY_ENGINE_TRACE"


def _plain(value: Any) -> Any:
    """Reduce a value to JSON-native data with a stable ordering."""
    if isinstance(value, Enum):
        return _plain(value.value)
    if isinstance(value, Decimal):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {str(_plain(k)): _plain(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted((_plain(v) for v in value), key=str)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return repr(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """Fingerprint of the named arguments; absent ones count as null."""
    document = {name: _plain(arguments.get(name)) for name in fingerprint_fields}
    canonical = json.dumps(document, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Decorate an engine entry point with trace logging.

    Args:
        engine_name: Short engine identifier, e.g. "allocation".
        engine_version: Bumped whenever the engine's results can change.
        fingerprint_fields: Names of the parameters that determine the result.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = (time.perf_counter() - started) * 1000

            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs).arguments
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound)
            else:
                fingerprint = ""

            _logger.debug(TRACE_TYPE, extra={
                "trace_type": TRACE_TYPE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "duration_ms": round(elapsed_ms, 3),
                "function": func.__qualname__,
            })
            return result

        return wrapper

    return decorator
