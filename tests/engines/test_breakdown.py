"""
Tests for the deal breakdown calculator.

Covers:
- VAT extraction for inclusive, exclusive and unregistered deals
- Corporation tax and dividend pool
- Deal expenses deducted before corporation tax
- Decomposition identities
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from divvy_engines.breakdown import compute_breakdown
from divvy_kernel.domain.values import DEFAULT_SETTINGS, DealInput


class TestVatTreatment:
    """How the deal amount is split into net and VAT."""

    def test_includes_vat(self, standard_deal, settings):
        b = compute_breakdown(standard_deal, settings)
        assert b.net == Decimal("4166.67")
        assert b.vat == Decimal("833.33")

    def test_excludes_vat(self, settings):
        deal = DealInput(deal_amount="1000", includes_vat=False)
        b = compute_breakdown(deal, settings)
        assert b.net == Decimal("1000.00")
        assert b.vat == Decimal("200.00")

    def test_not_registered_ignores_includes_flag(self, settings):
        deal = DealInput(deal_amount="1000", includes_vat=True, vat_registered=False)
        b = compute_breakdown(deal, settings)
        assert b.net == Decimal("1000.00")
        assert b.vat == Decimal("0.00")

    def test_inclusive_vat_absorbs_rounding(self, settings):
        """net is rounded; vat is whatever is left of the deal amount."""
        b = compute_breakdown(DealInput(deal_amount="100.00"), settings)
        assert b.net == Decimal("83.33")
        assert b.vat == Decimal("16.67")
        assert b.net + b.vat == Decimal("100.00")

    def test_custom_vat_rate(self):
        settings = replace(DEFAULT_SETTINGS, vat_rate="0.05")
        b = compute_breakdown(DealInput(deal_amount="105.00"), settings)
        assert b.net == Decimal("100.00")
        assert b.vat == Decimal("5.00")


class TestCorporationTax:

    def test_standard_deal(self, standard_deal, settings):
        b = compute_breakdown(standard_deal, settings)
        assert b.profit == Decimal("4166.67")
        assert b.corp_tax == Decimal("1041.67")
        assert b.dividend_pool == Decimal("3125.00")

    def test_zero_deal(self, settings):
        b = compute_breakdown(DealInput(deal_amount=0), settings)
        assert b.net == b.vat == b.corp_tax == b.dividend_pool == Decimal("0.00")

    def test_zero_corp_tax_rate(self):
        settings = replace(DEFAULT_SETTINGS, corp_tax_rate=0)
        deal = DealInput(deal_amount="1000", vat_registered=False)
        b = compute_breakdown(deal, settings)
        assert b.corp_tax == Decimal("0.00")
        assert b.dividend_pool == Decimal("1000.00")


class TestDealExpenses:

    def test_expenses_reduce_profit_before_tax(self, settings):
        deal = DealInput(deal_amount="5000", vat_registered=False, deal_expenses="1000")
        b = compute_breakdown(deal, settings)
        assert b.net == Decimal("5000.00")
        assert b.expenses == Decimal("1000.00")
        assert b.profit == Decimal("4000.00")
        assert b.corp_tax == Decimal("1000.00")
        assert b.dividend_pool == Decimal("3000.00")

    def test_expenses_above_net_floor_at_zero(self, settings):
        deal = DealInput(deal_amount="1000", vat_registered=False, deal_expenses="1500")
        b = compute_breakdown(deal, settings)
        assert b.profit == Decimal("0.00")
        assert b.corp_tax == Decimal("0.00")
        assert b.dividend_pool == Decimal("0.00")

    def test_expenses_do_not_touch_vat(self, standard_deal, settings):
        with_expenses = replace(standard_deal, deal_expenses="500")
        b = compute_breakdown(with_expenses, settings)
        assert b.vat == Decimal("833.33")
        assert b.profit == Decimal("3666.67")

    def test_no_expenses_profit_equals_net(self, standard_deal, settings):
        b = compute_breakdown(standard_deal, settings)
        assert b.expenses == Decimal("0.00")
        assert b.profit == b.net


class TestDecomposition:

    @pytest.mark.parametrize(
        "amount", ["0.01", "0.99", "1.00", "333.33", "5000.00", "12345.67", "999999.99",
                   "1000000000000"],
    )
    @pytest.mark.parametrize("includes_vat", [True, False])
    def test_profit_splits_into_tax_and_pool(self, amount, includes_vat, settings):
        b = compute_breakdown(DealInput(deal_amount=amount, includes_vat=includes_vat), settings)
        assert b.corp_tax + b.dividend_pool == b.profit

    @pytest.mark.parametrize("amount", ["0.01", "0.05", "19.99", "5000.00", "77777.77"])
    def test_inclusive_net_plus_vat_is_amount(self, amount, settings):
        b = compute_breakdown(DealInput(deal_amount=amount), settings)
        assert b.net + b.vat == Decimal(amount)


class TestTracing:

    def test_emits_engine_trace(self, standard_deal, settings, captured_logs):
        compute_breakdown(standard_deal, settings)
        traces = [r for r in captured_logs() if r["message"] == "DIVVY_ENGINE_TRACE"]
        assert traces
        assert traces[0]["engine_name"] == "breakdown"
        assert len(traces[0]["input_fingerprint"]) == 16
