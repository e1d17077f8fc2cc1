"""
Module: divvy_engines.breakdown
Responsibility:
    Convert a deal amount into its company-level parts: net of VAT, the VAT
    pot, allowable expenses, taxable profit, corporation tax and the
    dividend pool left for the directors.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import divvy_kernel/domain.

Invariants enforced:
    - All arithmetic is on integer pence; pounds appear only at the
      boundary (to_pence on entry, from_pence on exit).
    - VAT on a VAT-inclusive deal is the residual D - net, so
      net + vat == deal amount exactly. It is never rounded independently.
    - dividend_pool is the residual profit - corp_tax, so the two always
      reconstruct profit exactly.
    - profit never goes below zero, even when expenses exceed net.

Failure modes:
    - None for valid value objects; the function is total.

Usage:
    from divvy_engines.breakdown import compute_breakdown
    from divvy_kernel.domain.values import DealInput, DEFAULT_SETTINGS

    breakdown = compute_breakdown(DealInput(deal_amount="5000.00"), DEFAULT_SETTINGS)
    breakdown.dividend_pool  # Decimal("3125.00")
"""

from __future__ import annotations

from decimal import Decimal

from divvy_engines.tracer import traced_engine
from divvy_kernel.domain.money import from_pence, round_pence, to_pence
from divvy_kernel.domain.values import DealBreakdown, DealInput, TaxSettings
from divvy_kernel.logging_config import get_logger

logger = get_logger("engines.breakdown")


def _split_vat(deal_pence: int, deal: DealInput, vat_rate: Decimal) -> tuple[int, int]:
    """Return (net, vat) in pence."""
    if not deal.vat_registered:
        return deal_pence, 0
    if deal.includes_vat:
        net = round_pence(Decimal(deal_pence) / (Decimal("1") + vat_rate))
        return net, deal_pence - net
    return deal_pence, round_pence(deal_pence * vat_rate)


@traced_engine("breakdown", "1.1", fingerprint_fields=("deal", "settings"))
def compute_breakdown(deal: DealInput, settings: TaxSettings) -> DealBreakdown:
    """
    Compute the VAT / corporation tax / dividend pool breakdown of a deal.

    Steps (all in pence):
        1. D = deal amount, E = deal expenses.
        2. Not VAT registered: net = D, vat = 0.
           Includes VAT: net = round(D / (1 + vat_rate)), vat = D - net.
           Excludes VAT: net = D, vat = round(D * vat_rate).
        3. profit = max(0, net - E).
        4. corp_tax = round(profit * corp_tax_rate).
        5. dividend_pool = profit - corp_tax.

    Returns:
        DealBreakdown with every amount in pounds to two decimal places.
    """
    deal_pence = to_pence(deal.deal_amount)
    expenses_pence = to_pence(deal.deal_expenses)

    net_pence, vat_pence = _split_vat(deal_pence, deal, settings.vat_rate)
    profit_pence = max(0, net_pence - expenses_pence)
    corp_tax_pence = round_pence(profit_pence * settings.corp_tax_rate)
    dividend_pool_pence = profit_pence - corp_tax_pence

    logger.debug("breakdown_computed", extra={
        "deal_pence": deal_pence,
        "net_pence": net_pence,
        "vat_pence": vat_pence,
        "expenses_pence": expenses_pence,
        "profit_pence": profit_pence,
        "corp_tax_pence": corp_tax_pence,
        "dividend_pool_pence": dividend_pool_pence,
        "vat_registered": deal.vat_registered,
        "includes_vat": deal.includes_vat,
    })

    return DealBreakdown(
        net=from_pence(net_pence),
        vat=from_pence(vat_pence),
        expenses=from_pence(expenses_pence),
        profit=from_pence(profit_pence),
        corp_tax=from_pence(corp_tax_pence),
        dividend_pool=from_pence(dividend_pool_pence),
    )
