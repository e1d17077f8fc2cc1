"""
SessionState -- the last-used inputs of the planner.

Persisted between runs so the next session opens where the previous one
stopped. The default state takes its VAT flags from the active settings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from divvy_kernel.domain.values import (
    DealInput,
    Director,
    DividendRateTier,
    SplitMethod,
    TaxSettings,
)

DEFAULT_DIRECTOR = Director(id="1", name="Director 1", split_percent=Decimal("1"))


@dataclass(frozen=True)
class SessionState:
    """Deal input, roster, split method and tier of one planning session."""

    deal_input: DealInput
    directors: tuple[Director, ...] = (DEFAULT_DIRECTOR,)
    split_method: SplitMethod = SplitMethod.EQUAL
    dividend_rate_tier: DividendRateTier = DividendRateTier.BASIC
    locked_director_ids: frozenset[str] = field(default_factory=frozenset)


def default_session_state(settings: TaxSettings) -> SessionState:
    """Empty deal with one director, VAT flags from the settings defaults."""
    return SessionState(
        deal_input=DealInput(
            deal_amount=Decimal("0"),
            includes_vat=settings.default_includes_vat,
            vat_registered=settings.default_vat_registered,
            deal_expenses=Decimal("0"),
        ),
    )
