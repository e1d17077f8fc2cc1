"""
Deal result aggregator.

Composes the breakdown calculator, the pool splitter and the director tax
calculator into one DealResult. Totals are summed in pence so they
reconstruct the dividend pool exactly.
"""

from __future__ import annotations

from collections.abc import Sequence

from divvy_engines.breakdown import compute_breakdown
from divvy_engines.dividend_tax import compute_director_results
from divvy_engines.tracer import traced_engine
from divvy_kernel.domain.money import from_pence, to_pence
from divvy_kernel.domain.values import (
    DealInput,
    DealResult,
    Director,
    DividendRateTier,
    SplitMethod,
    TaxSettings,
)
from divvy_kernel.logging_config import get_logger

logger = get_logger("engines.deal")


@traced_engine(
    "deal",
    "1.1",
    fingerprint_fields=("deal", "directors", "method", "tier", "settings"),
)
def compute_deal_result(
    deal: DealInput,
    directors: Sequence[Director],
    method: SplitMethod,
    tier: DividendRateTier,
    settings: TaxSettings,
) -> DealResult:
    """
    Full deal calculation: breakdown, per-director results and totals.

    Guarantees:
        - sum of dividend shares == breakdown.dividend_pool
        - total_personal_tax + total_take_home == breakdown.dividend_pool
    """
    breakdown = compute_breakdown(deal, settings)
    results = compute_director_results(
        breakdown.dividend_pool, directors, method, tier, settings
    )

    total_tax_pence = sum(to_pence(r.personal_dividend_tax) for r in results)
    total_take_home_pence = sum(to_pence(r.take_home) for r in results)

    result = DealResult(
        breakdown=breakdown,
        directors=tuple(results),
        total_personal_tax=from_pence(total_tax_pence),
        total_take_home=from_pence(total_take_home_pence),
    )

    logger.info("deal_result_computed", extra={
        "dividend_pool": breakdown.dividend_pool,
        "director_count": result.director_count,
        "penny_adjusted": result.has_penny_adjustment,
        "method": SplitMethod(method).value,
        "tier": DividendRateTier(tier).value,
        "total_personal_tax_pence": total_tax_pence,
        "total_take_home_pence": total_take_home_pence,
    })
    return result
