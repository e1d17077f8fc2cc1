"""
Pure domain layer.

This module contains value objects and money helpers with NO
dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from divvy_kernel.domain.money import (
    DEFAULT_ROUNDING,
    MAX_AMOUNT,
    PENCE_PER_POUND,
    format_gbp,
    format_percent,
    from_pence,
    round_pence,
    to_pence,
)
from divvy_kernel.domain.values import (
    DEFAULT_PRESET_RATES,
    DEFAULT_SETTINGS,
    DealBreakdown,
    DealInput,
    DealResult,
    Director,
    DirectorResult,
    DividendRatePreset,
    DividendRateTier,
    PresetRates,
    SplitMethod,
    TaxSettings,
)

__all__ = [
    # Money
    "DEFAULT_ROUNDING",
    "MAX_AMOUNT",
    "PENCE_PER_POUND",
    "to_pence",
    "from_pence",
    "round_pence",
    "format_gbp",
    "format_percent",
    # Enums
    "DividendRatePreset",
    "DividendRateTier",
    "SplitMethod",
    # Value objects
    "PresetRates",
    "TaxSettings",
    "Director",
    "DealInput",
    "DealBreakdown",
    "DirectorResult",
    "DealResult",
    "DEFAULT_PRESET_RATES",
    "DEFAULT_SETTINGS",
]
