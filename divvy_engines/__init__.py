"""
Module: divvy_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines. This is the canonical import surface for the
    services and CLI layers.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import divvy_kernel (domain, exceptions, logging).
    MUST NOT import divvy_services, divvy_config or divvy_cli.

Invariants enforced:
    - Integer-pence arithmetic: amounts are converted to pence on entry
      and back to pounds on exit; floats never take part in a calculation.
    - Conservation: no penny is created or lost when splitting a pool or
      taxing a share.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine entry point is traced via ``@traced_engine`` (see
    ``divvy_engines.tracer``), emitting DIVVY_ENGINE_TRACE log records with
    engine name, version, input fingerprint and duration.

Usage:
    from divvy_engines import compute_deal_result, format_summary
"""

from divvy_kernel.logging_config import get_logger

logger = get_logger("engines")

from divvy_engines.allocation import PoolAllocation, allocate_pool, split_pool
from divvy_engines.breakdown import compute_breakdown
from divvy_engines.deal import compute_deal_result
from divvy_engines.dividend_tax import compute_director_results
from divvy_engines.rates import resolve_rate
from divvy_engines.redistribution import (
    MAX_DIRECTORS,
    MIN_DIRECTORS,
    add_director,
    commit_split,
    redistribute,
    remove_director,
)
from divvy_engines.split_validation import SPLIT_TOLERANCE, is_valid_split, total_split
from divvy_engines.summary import format_summary

__all__ = [
    # Breakdown
    "compute_breakdown",
    # Allocation
    "PoolAllocation",
    "allocate_pool",
    "split_pool",
    # Rates and director tax
    "resolve_rate",
    "compute_director_results",
    # Aggregation
    "compute_deal_result",
    # Validation
    "SPLIT_TOLERANCE",
    "is_valid_split",
    "total_split",
    # Summary
    "format_summary",
    # Roster
    "MIN_DIRECTORS",
    "MAX_DIRECTORS",
    "redistribute",
    "add_director",
    "remove_director",
    "commit_split",
]
