"""
Dividend rate resolution.

The dividend tax tier is a property of the whole deal: one rate is resolved
per calculation and applied to every director.
"""

from __future__ import annotations

from decimal import Decimal

from divvy_kernel.domain.values import DividendRateTier, TaxSettings


def resolve_rate(tier: DividendRateTier, settings: TaxSettings) -> Decimal:
    """
    Rate applied to dividend income for a tier.

    ``custom`` returns ``settings.custom_dividend_rate`` regardless of the
    preset; the statutory tiers index the active preset's rate table.
    """
    tier = DividendRateTier(tier)
    if tier == DividendRateTier.CUSTOM:
        return settings.custom_dividend_rate
    return settings.active_preset_rates.for_tier(tier)
