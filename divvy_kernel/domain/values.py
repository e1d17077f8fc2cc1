"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the typed inputs and outputs of the planning engines:
    TaxSettings (with its dividend rate presets), Director, DealInput,
    DealBreakdown, DirectorResult and DealResult, plus the closed
    enumerations that select presets, tiers and split methods.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every engine. No outward dependencies except
    divvy_kernel.exceptions.

Invariants enforced:
    - Monetary amounts and rates are Decimal, never float. Constructors
      accept int/str/float/Decimal and normalise through str().
    - Rates (VAT, corporation tax, dividend tiers, custom rate) lie in [0, 1].
    - Deal amounts and expenses are non-negative.
    - A director split fraction lies in [0, 1].
    - Every DividendRatePreset has a PresetRates table in TaxSettings.

Failure modes:
    - InvalidRateError / InvalidAmountError / InvalidSplitPercentError on
      construction with out-of-range values. Values are rejected, never
      clamped; clamping is a form-layer decision.
    - ValidationError when a preset table is missing.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from divvy_kernel.domain.money import MAX_AMOUNT
from divvy_kernel.exceptions import (
    InvalidAmountError,
    InvalidRateError,
    InvalidSplitPercentError,
    ValidationError,
)

_ZERO = Decimal("0")
_ONE = Decimal("1")


class DividendRatePreset(str, Enum):
    """Named dividend tax regime."""

    CURRENT = "current"
    APRIL_2026 = "april2026"


class DividendRateTier(str, Enum):
    """Dividend tax band applied to every director of a deal."""

    BASIC = "basic"
    HIGHER = "higher"
    ADDITIONAL = "additional"
    CUSTOM = "custom"  # Uses TaxSettings.custom_dividend_rate


class SplitMethod(str, Enum):
    """How the dividend pool is divided among directors."""

    EQUAL = "equal"  # Even division, remainder pennies to the earliest directors
    CUSTOM = "custom"  # Proportional to split_percent, correction on the last director


def _to_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            return None
    if not result.is_finite():
        return None
    return result


def _rate(field_name: str, value: Any) -> Decimal:
    rate = _to_decimal(value)
    if rate is None or rate < _ZERO or rate > _ONE:
        raise InvalidRateError(field_name, value)
    return rate


def _amount(field_name: str, value: Any) -> Decimal:
    amount = _to_decimal(value)
    if amount is None or amount < _ZERO or amount > MAX_AMOUNT:
        raise InvalidAmountError(field_name, value)
    return amount


def _as_enum(enum_type: type[Enum], field_name: str, value: Any) -> Any:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError as e:
        raise ValidationError(
            field_name, value, f"{field_name} must be one of "
            f"{[m.value for m in enum_type]}, got {value!r}"
        ) from e


@dataclass(frozen=True)
class PresetRates:
    """
    Dividend tax rates for the three statutory bands of one preset.

    Guarantees:
        - Each rate is a Decimal in [0, 1].
    """

    basic: Decimal
    higher: Decimal
    additional: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "basic", _rate("basic", self.basic))
        object.__setattr__(self, "higher", _rate("higher", self.higher))
        object.__setattr__(self, "additional", _rate("additional", self.additional))

    def for_tier(self, tier: DividendRateTier) -> Decimal:
        """Rate for a statutory tier. The custom tier has no preset rate."""
        if tier == DividendRateTier.CUSTOM:
            raise ValueError("Custom tier is not part of a preset table")
        return getattr(self, DividendRateTier(tier).value)


DEFAULT_PRESET_RATES: dict[DividendRatePreset, PresetRates] = {
    DividendRatePreset.CURRENT: PresetRates(
        basic=Decimal("0.0875"),
        higher=Decimal("0.3375"),
        additional=Decimal("0.3935"),
    ),
    DividendRatePreset.APRIL_2026: PresetRates(
        basic=Decimal("0.1075"),
        higher=Decimal("0.3575"),
        additional=Decimal("0.3935"),
    ),
}


@dataclass(frozen=True)
class TaxSettings:
    """
    Application-wide tax settings.

    Contract:
        Created once from hard-coded defaults (DEFAULT_SETTINGS) or a
        settings file; edits produce a new instance via dataclasses.replace.

    Guarantees:
        - vat_rate, corp_tax_rate and custom_dividend_rate lie in [0, 1].
        - preset_rates holds a PresetRates table for every DividendRatePreset.
        - dividend_preset is a DividendRatePreset member.

    Non-goals:
        - Does not choose a tier; the tier belongs to the deal, not the settings.
    """

    vat_rate: Decimal = Decimal("0.20")
    corp_tax_rate: Decimal = Decimal("0.25")
    dividend_preset: DividendRatePreset = DividendRatePreset.CURRENT
    preset_rates: Mapping[DividendRatePreset, PresetRates] = field(
        default_factory=lambda: dict(DEFAULT_PRESET_RATES),
        hash=False,
    )
    custom_dividend_rate: Decimal = Decimal("0.125")
    default_includes_vat: bool = True
    default_vat_registered: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "vat_rate", _rate("vat_rate", self.vat_rate))
        object.__setattr__(
            self, "corp_tax_rate", _rate("corp_tax_rate", self.corp_tax_rate)
        )
        object.__setattr__(
            self,
            "custom_dividend_rate",
            _rate("custom_dividend_rate", self.custom_dividend_rate),
        )
        object.__setattr__(
            self,
            "dividend_preset",
            _as_enum(DividendRatePreset, "dividend_preset", self.dividend_preset),
        )

        tables: dict[DividendRatePreset, PresetRates] = {}
        for key, rates in self.preset_rates.items():
            preset = _as_enum(DividendRatePreset, "preset_rates", key)
            if isinstance(rates, Mapping):
                rates = PresetRates(**rates)
            tables[preset] = rates
        missing = [p.value for p in DividendRatePreset if p not in tables]
        if missing:
            raise ValidationError(
                "preset_rates", missing, f"Missing dividend rate presets: {missing}"
            )
        object.__setattr__(self, "preset_rates", tables)

    @property
    def active_preset_rates(self) -> PresetRates:
        """Rate table of the selected preset."""
        return self.preset_rates[self.dividend_preset]


DEFAULT_SETTINGS = TaxSettings()


@dataclass(frozen=True)
class Director:
    """
    A company director sharing in the dividend pool.

    Guarantees:
        - split_percent is a Decimal fraction in [0, 1]. It is only read when
          the split method is custom.
    Non-goals:
        - Does not generate ids; uniqueness within a roster is the caller's job.
    """

    id: str
    name: str
    split_percent: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        split = _to_decimal(self.split_percent)
        if split is None or split < _ZERO or split > _ONE:
            raise InvalidSplitPercentError(self.id, self.split_percent)
        object.__setattr__(self, "split_percent", split)


@dataclass(frozen=True)
class DealInput:
    """
    One client deal.

    includes_vat is only meaningful when vat_registered is true.
    deal_expenses are deducted from net before corporation tax.
    """

    deal_amount: Decimal
    includes_vat: bool = True
    vat_registered: bool = True
    deal_expenses: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        object.__setattr__(self, "deal_amount", _amount("deal_amount", self.deal_amount))
        object.__setattr__(
            self, "deal_expenses", _amount("deal_expenses", self.deal_expenses)
        )


@dataclass(frozen=True)
class DealBreakdown:
    """
    Company-level split of a deal, in pounds with two decimal places.

    Guarantees (by construction in divvy_engines.breakdown):
        - profit - corp_tax == dividend_pool exactly.
        - profit == max(0, net - expenses); with no expenses profit == net.
        - net + vat == deal amount exactly when the deal includes VAT.
    """

    net: Decimal
    vat: Decimal
    expenses: Decimal
    profit: Decimal
    corp_tax: Decimal
    dividend_pool: Decimal


@dataclass(frozen=True)
class DirectorResult:
    """
    One director's share of the dividend pool and the personal tax on it.

    split_percent is the fraction actually applied: 1/N under the equal
    method regardless of the stored split.
    adjusted_by_penny marks the director that absorbed the custom-split
    rounding correction.
    """

    id: str
    name: str
    split_percent: Decimal
    dividend_share: Decimal
    applied_rate: Decimal
    personal_dividend_tax: Decimal
    take_home: Decimal
    adjusted_by_penny: bool = False


@dataclass(frozen=True)
class DealResult:
    """
    Complete deal calculation.

    Guarantees:
        - directors are in input order.
        - sum(dividend_share) == breakdown.dividend_pool to the penny.
        - total_personal_tax + total_take_home == breakdown.dividend_pool.
    """

    breakdown: DealBreakdown
    directors: tuple[DirectorResult, ...]
    total_personal_tax: Decimal
    total_take_home: Decimal

    @property
    def director_count(self) -> int:
        return len(self.directors)

    @property
    def has_penny_adjustment(self) -> bool:
        """True if some director absorbed a rounding correction."""
        return any(d.adjusted_by_penny for d in self.directors)
