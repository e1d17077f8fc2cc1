"""
Module: divvy_engines.dividend_tax
Responsibility:
    Turn each director's pence share of the dividend pool into a
    DirectorResult: personal dividend tax at the deal's applied rate and
    the take-home amount left after it.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Builds on divvy_engines.allocation and divvy_engines.rates.

Invariants enforced:
    - tax = round(share * applied_rate); take_home = share - tax, so
      tax + take_home == share exactly for every director.
    - applied_rate is resolved once per call and is identical for every
      director in the result.
    - adjusted_by_penny is set only on the last director, only for the
      custom method, and only when the custom allocation had to correct
      the rounded shares to reach the pool.
    - Effective split_percent is 1/N for the equal method.

Failure modes:
    - None for valid value objects.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from divvy_engines.allocation import allocate_pool
from divvy_engines.rates import resolve_rate
from divvy_engines.tracer import traced_engine
from divvy_kernel.domain.money import from_pence, round_pence
from divvy_kernel.domain.values import (
    Director,
    DirectorResult,
    DividendRateTier,
    SplitMethod,
    TaxSettings,
)
from divvy_kernel.logging_config import get_logger

logger = get_logger("engines.dividend_tax")


def _effective_split(director: Director, method: SplitMethod, count: int) -> Decimal:
    if method == SplitMethod.EQUAL:
        return Decimal("1") / Decimal(count)
    return director.split_percent


@traced_engine(
    "dividend_tax",
    "1.0",
    fingerprint_fields=("pool", "directors", "method", "tier", "settings"),
)
def compute_director_results(
    pool: Decimal,
    directors: Sequence[Director],
    method: SplitMethod,
    tier: DividendRateTier,
    settings: TaxSettings,
) -> list[DirectorResult]:
    """
    Split the pool and apply personal dividend tax to each share.

    Args:
        pool: Dividend pool in pounds.
        directors: Recipients in display order.
        method: Equal or custom split.
        tier: Dividend tax tier for the whole deal.
        settings: Source of preset and custom rates.

    Returns:
        One DirectorResult per director, in input order.
    """
    method = SplitMethod(method)
    allocation = allocate_pool(pool, directors, method)
    applied_rate = resolve_rate(tier, settings)
    last_index = len(directors) - 1

    results: list[DirectorResult] = []
    for index, (director, share_pence) in enumerate(zip(directors, allocation.shares)):
        tax_pence = round_pence(share_pence * applied_rate)
        take_home_pence = share_pence - tax_pence

        results.append(
            DirectorResult(
                id=director.id,
                name=director.name,
                split_percent=_effective_split(director, method, len(directors)),
                dividend_share=from_pence(share_pence),
                applied_rate=applied_rate,
                personal_dividend_tax=from_pence(tax_pence),
                take_home=from_pence(take_home_pence),
                adjusted_by_penny=(
                    index == last_index
                    and method == SplitMethod.CUSTOM
                    and allocation.was_adjusted
                ),
            )
        )

    if allocation.was_adjusted:
        logger.info("penny_adjustment_applied", extra={
            "director_id": directors[last_index].id,
            "rounding_adjustment": allocation.rounding_adjustment,
            "pool_pence": allocation.pool_pence,
        })

    return results
