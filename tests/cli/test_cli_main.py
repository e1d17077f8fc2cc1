"""Tests for the divvyplan command line (divvy_cli/main.py)."""

from decimal import Decimal

import pytest

from divvy_cli.main import build_parser, main
from divvy_cli.util import build_roster, parse_director_arg
from divvy_kernel.db.engine import reset_engine
from divvy_kernel.exceptions import DirectorLimitError, InvalidSplitPercentError


@pytest.fixture
def db_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'planner.db'}"
    yield url
    reset_engine()


class TestParseDirectorArg:

    def test_name_only(self):
        assert parse_director_arg("Alice") == ("Alice", None)

    def test_percent(self):
        assert parse_director_arg("Alice=60") == ("Alice", Decimal("0.6"))

    def test_percent_sign_and_spaces(self):
        assert parse_director_arg(" Bob = 12.5% ") == ("Bob", Decimal("0.125"))

    def test_bad_percent(self):
        with pytest.raises(InvalidSplitPercentError):
            parse_director_arg("Alice=lots")


class TestBuildRoster:

    def test_equal_roster(self):
        roster, locked = build_roster([("A", None), ("B", None)])
        assert [d.id for d in roster] == ["1", "2"]
        assert [d.split_percent for d in roster] == [Decimal("0.5"), Decimal("0.5")]
        assert locked == frozenset()

    def test_fixed_split_shares_remainder(self):
        roster, locked = build_roster([("A", Decimal("0.6")), ("B", None), ("C", None)])
        assert [d.split_percent for d in roster] == [
            Decimal("0.6"), Decimal("0.2"), Decimal("0.2"),
        ]
        assert locked == frozenset({"1"})

    def test_seven_directors_rejected(self):
        with pytest.raises(DirectorLimitError):
            build_roster([(f"D{i}", None) for i in range(7)])


class TestCalc:

    def test_reference_deal(self, capsys):
        assert main(["calc", "5000", "-d", "Alice", "-d", "Bob"]) == 0
        out = capsys.readouterr().out
        assert "  Dividend Pool: £3125.00" in out
        assert "  Alice: £1562.50 dividend → £136.72 tax → £1425.78 take-home" in out
        assert "  Total Take-Home: £2851.56" in out

    def test_default_single_director(self, capsys):
        assert main(["calc", "1200"]) == 0
        out = capsys.readouterr().out
        assert "  Director 1: £750.00 dividend" in out

    def test_expenses_and_vat_flags(self, capsys):
        assert main([
            "calc", "5000", "--expenses", "1000", "--not-vat-registered", "-d", "Solo",
        ]) == 0
        out = capsys.readouterr().out
        assert "Deal Expenses: £1000.00" in out
        assert "VAT Registered: No" in out
        assert "  Dividend Pool: £3000.00" in out

    def test_excludes_vat(self, capsys):
        assert main(["calc", "1000", "--excludes-vat"]) == 0
        out = capsys.readouterr().out
        assert "VAT Treatment: Excludes VAT" in out
        assert "  VAT: £200.00" in out

    def test_custom_split(self, capsys):
        assert main(["calc", "1000", "--not-vat-registered",
                     "-d", "Alice=60", "-d", "Bob=40"]) == 0
        out = capsys.readouterr().out
        assert "  Alice: £450.00 dividend" in out
        assert "  Bob: £300.00 dividend" in out

    def test_invalid_custom_split_warns(self, capsys):
        assert main(["calc", "1000", "-d", "Alice=50", "-d", "Bob=30"]) == 0
        captured = capsys.readouterr()
        assert "Warning: director splits total 80.00%, not 100%." in captured.err

    def test_tier_and_preset(self, capsys):
        assert main(["calc", "5000", "--tier", "higher", "--preset", "april2026"]) == 0
        assert "Directors (35.75% dividend tax):" in capsys.readouterr().out

    def test_custom_rate(self, capsys):
        assert main(["calc", "5000", "--tier", "custom", "--custom-rate", "0.2"]) == 0
        assert "Directors (20.00% dividend tax):" in capsys.readouterr().out

    def test_settings_file(self, tmp_path, capsys):
        path = tmp_path / "settings.yaml"
        path.write_text('corp_tax_rate: "0.19"\n', encoding="utf-8")
        assert main(["calc", "1000", "--not-vat-registered", "--settings", str(path)]) == 0
        assert "  Corporation Tax (19%): £190.00" in capsys.readouterr().out

    def test_invalid_amount_exit_code(self, capsys):
        assert main(["calc", "abc"]) == 1
        assert "Error: deal_amount must be a non-negative amount" in capsys.readouterr().err

    def test_amount_above_maximum_exit_code(self, capsys):
        assert main(["calc", "1e30"]) == 1
        assert "no greater than 1,000,000,000,000" in capsys.readouterr().err

    def test_invalid_custom_rate_exit_code(self, capsys):
        assert main(["calc", "100", "--custom-rate", "3"]) == 1
        assert "custom_dividend_rate" in capsys.readouterr().err

    def test_missing_settings_file(self, tmp_path, capsys):
        assert main(["calc", "100", "--settings", str(tmp_path / "nope.yaml")]) == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_settings_file_with_numeric_key(self, tmp_path, capsys):
        path = tmp_path / "settings.yaml"
        path.write_text("1: x\n", encoding="utf-8")
        assert main(["calc", "100", "--settings", str(path)]) == 1
        assert "unknown setting" in capsys.readouterr().err

    def test_unknown_tier_rejected_by_parser(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["calc", "100", "--tier", "platinum"])


class TestSettingsSets:

    def test_calc_with_named_set(self, capsys):
        assert main(["calc", "5000", "--set", "april2026"]) == 0
        assert "Directors (10.75% dividend tax):" in capsys.readouterr().out

    def test_set_supplies_vat_default(self, capsys):
        assert main(["calc", "1000", "--set", "unregistered"]) == 0
        with_set = capsys.readouterr().out
        assert main(["calc", "1000", "--not-vat-registered"]) == 0
        assert with_set == capsys.readouterr().out

    def test_set_and_settings_file_are_exclusive(self, tmp_path):
        with pytest.raises(SystemExit):
            build_parser().parse_args([
                "calc", "100", "--set", "april2026", "--settings", str(tmp_path / "s.yaml"),
            ])

    def test_unknown_set_rejected_by_parser(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["calc", "100", "--set", "2099"])

    def test_show_named_set(self, capsys):
        assert main(["show-settings", "--set", "april2026"]) == 0
        out = capsys.readouterr().out
        assert "dividend_preset: april2026" in out
        assert "default_vat_registered: true" in out


class TestStoredSession:

    def test_save_then_reuse_roster(self, db_url, capsys):
        assert main([
            "calc", "1000", "--db", db_url, "--save",
            "-d", "Alice=70", "-d", "Bob",
        ]) == 0
        capsys.readouterr()

        assert main(["calc", "1000", "--not-vat-registered", "--db", db_url]) == 0
        out = capsys.readouterr().out
        assert "  Alice: £525.00 dividend" in out
        assert "  Bob: £225.00 dividend" in out

    def test_show_and_reset_settings(self, db_url, capsys):
        assert main(["calc", "100", "--preset", "april2026", "--db", db_url, "--save"]) == 0
        capsys.readouterr()

        assert main(["show-settings", "--db", db_url]) == 0
        assert "dividend_preset: april2026" in capsys.readouterr().out

        assert main(["reset-settings", "--db", db_url]) == 0
        assert "Settings reset to defaults." in capsys.readouterr().out

        assert main(["show-settings", "--db", db_url]) == 0
        assert "dividend_preset: current" in capsys.readouterr().out

    def test_reset_all(self, db_url, capsys):
        assert main(["reset-settings", "--all", "--db", db_url]) == 0
        assert "All planner data cleared." in capsys.readouterr().out
