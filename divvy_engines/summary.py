"""
Module: divvy_engines.summary
Responsibility:
    Render a DealResult as a fixed-format plain-text report suitable for
    copying into an email or note.

Architecture position:
    Engines -- pure presentation helper, zero I/O.

Invariants enforced:
    - Deterministic: identical inputs give byte-identical text.
    - Line order is fixed. Blank lines separate sections and are part of
      the format. Optional lines (VAT treatment, expenses, profit) are
      omitted entirely, never rendered empty.
    - Amounts are rendered as pounds with two decimals and no thousands
      separator; the corporation tax rate as a whole percent; the dividend
      rate with two decimals.
"""

from __future__ import annotations

from decimal import Decimal

from divvy_engines.rates import resolve_rate
from divvy_kernel.domain.money import (
    DEFAULT_ROUNDING,
    format_percent,
    from_pence,
    to_pence,
)
from divvy_kernel.domain.values import (
    DealInput,
    DealResult,
    DividendRateTier,
    TaxSettings,
)

TITLE = "DivvyPlan Summary"
DISCLAIMER = "Note: This is a planning estimate only, not tax advice."
CURRENCY_SYMBOL = "£"


def _gbp(amount: Decimal) -> str:
    return f"{CURRENCY_SYMBOL}{from_pence(to_pence(amount))}"


def _whole_percent(rate: Decimal) -> str:
    return f"{(rate * 100).quantize(Decimal('1'), rounding=DEFAULT_ROUNDING)}%"


def format_summary(
    deal: DealInput,
    result: DealResult,
    settings: TaxSettings,
    tier: DividendRateTier,
) -> str:
    """Build the multi-line summary report for a computed deal."""
    breakdown = result.breakdown
    has_expenses = breakdown.expenses > 0
    applied_rate = resolve_rate(tier, settings)

    lines = [TITLE, "=" * 16, ""]

    lines.append(f"Deal Amount: {_gbp(deal.deal_amount)}")
    if has_expenses:
        lines.append(f"Deal Expenses: {_gbp(breakdown.expenses)}")
    lines.append(f"VAT Registered: {'Yes' if deal.vat_registered else 'No'}")
    if deal.vat_registered:
        treatment = "Includes VAT" if deal.includes_vat else "Excludes VAT"
        lines.append(f"VAT Treatment: {treatment}")
    lines.append("")

    lines.append("Breakdown:")
    lines.append(f"  Net (ex VAT): {_gbp(breakdown.net)}")
    lines.append(f"  VAT: {_gbp(breakdown.vat)}")
    if has_expenses:
        lines.append(f"  Profit after expenses: {_gbp(breakdown.profit)}")
    lines.append(
        f"  Corporation Tax ({_whole_percent(settings.corp_tax_rate)}): "
        f"{_gbp(breakdown.corp_tax)}"
    )
    lines.append(f"  Dividend Pool: {_gbp(breakdown.dividend_pool)}")
    lines.append("")

    lines.append(f"Directors ({format_percent(applied_rate)} dividend tax):")
    for d in result.directors:
        lines.append(
            f"  {d.name}: {_gbp(d.dividend_share)} dividend → "
            f"{_gbp(d.personal_dividend_tax)} tax → "
            f"{_gbp(d.take_home)} take-home"
        )
    lines.append("")

    lines.append("Totals:")
    lines.append(f"  Total Dividend Tax: {_gbp(result.total_personal_tax)}")
    lines.append(f"  Total Take-Home: {_gbp(result.total_take_home)}")
    lines.append("")
    lines.append(DISCLAIMER)

    return "\n".join(lines)
