"""
DivvyPlan command line: calculate a deal, inspect or reset stored settings.

Usage:
  divvyplan calc 5000 --director Alice --director Bob
  divvyplan calc 12000 --expenses 1500 --director Alice=60 --director Bob --tier higher
  divvyplan calc 3000 --not-vat-registered --db sqlite:///divvyplan.db --save
  divvyplan calc 5000 --set april2026
  divvyplan show-settings
  divvyplan show-settings --set unregistered
  divvyplan reset-settings
"""

from __future__ import annotations

import argparse
import sys
import uuid
from dataclasses import replace
from pathlib import Path

import yaml

from divvy_cli.util import build_roster, parse_director_arg, setup_logging
from divvy_config import available_sets, get_active_settings, settings_to_dict
from divvy_engines import compute_deal_result, format_summary, is_valid_split, total_split
from divvy_kernel.db.engine import (
    DEFAULT_DATABASE_URL,
    create_tables,
    get_session_factory,
    init_engine_from_url,
)
from divvy_kernel.domain.money import format_percent
from divvy_kernel.domain.values import (
    DealInput,
    DividendRatePreset,
    DividendRateTier,
    SplitMethod,
    TaxSettings,
)
from divvy_kernel.exceptions import DivvyPlanError
from divvy_kernel.logging_config import LogContext, get_logger
from divvy_services import PlannerStore, SessionState

logger = get_logger("cli")


def _open_store(database_url: str) -> PlannerStore:
    engine = init_engine_from_url(database_url)
    create_tables(engine)
    return PlannerStore(get_session_factory())


def _resolve_settings(args: argparse.Namespace, store: PlannerStore | None) -> TaxSettings:
    if args.settings is not None:
        settings = get_active_settings(path=args.settings)
    elif args.set_name is not None:
        settings = get_active_settings(set_name=args.set_name)
    elif store is not None:
        settings = store.load_settings()
    else:
        settings = get_active_settings()

    if args.preset is not None:
        settings = replace(settings, dividend_preset=args.preset)
    if args.custom_rate is not None:
        settings = replace(settings, custom_dividend_rate=args.custom_rate)
    return settings


def cmd_calc(args: argparse.Namespace) -> int:
    store = None
    if args.db is not None or args.save:
        store = _open_store(args.db or DEFAULT_DATABASE_URL)

    settings = _resolve_settings(args, store)

    if args.director:
        specs = [parse_director_arg(text) for text in args.director]
        directors, locked = build_roster(specs)
        method = (
            SplitMethod.CUSTOM
            if any(percent is not None for _, percent in specs)
            else SplitMethod.EQUAL
        )
    elif store is not None:
        last = store.load_last_state(settings)
        directors, locked, method = (
            last.directors, last.locked_director_ids, last.split_method,
        )
    else:
        directors, locked = build_roster([("Director 1", None)])
        method = SplitMethod.EQUAL

    deal = DealInput(
        deal_amount=args.amount,
        includes_vat=settings.default_includes_vat and not args.excludes_vat,
        vat_registered=settings.default_vat_registered and not args.not_vat_registered,
        deal_expenses=args.expenses,
    )
    tier = DividendRateTier(args.tier)

    result = compute_deal_result(deal, directors, method, tier, settings)
    print(format_summary(deal, result, settings, tier))

    if method is SplitMethod.CUSTOM and not is_valid_split(directors):
        print(
            f"\nWarning: director splits total {format_percent(total_split(directors))}, "
            "not 100%.",
            file=sys.stderr,
        )

    if args.save and store is not None:
        store.save_last_state(SessionState(
            deal_input=deal,
            directors=tuple(directors),
            split_method=method,
            dividend_rate_tier=tier,
            locked_director_ids=frozenset(locked),
        ))
        store.save_settings(settings)
        print("\nSaved.", file=sys.stderr)
    return 0


def cmd_show_settings(args: argparse.Namespace) -> int:
    if args.set_name is not None:
        settings = get_active_settings(set_name=args.set_name)
    else:
        settings = _open_store(args.db).load_settings()
    print(yaml.safe_dump(settings_to_dict(settings), sort_keys=False), end="")
    return 0


def cmd_reset_settings(args: argparse.Namespace) -> int:
    store = _open_store(args.db)
    if args.all:
        store.clear_all_data()
        print("All planner data cleared.")
    else:
        store.reset_settings()
        print("Settings reset to defaults.")
    return 0


def _add_set_option(parser) -> None:
    parser.add_argument(
        "--set",
        dest="set_name",
        choices=available_sets(),
        default=None,
        help="Packaged settings set overlaid on the defaults.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="divvyplan",
        description="Estimate how a client deal turns into director dividends after UK taxes.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Write debug logs (JSON lines) to stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    calc = sub.add_parser("calc", help="Calculate a deal and print the summary.")
    calc.add_argument("amount", help="Deal amount in pounds, e.g. 5000 or 1234.56")
    calc.add_argument(
        "--expenses",
        default="0",
        help="Deal expenses deducted before corporation tax (default: 0).",
    )
    calc.add_argument(
        "--excludes-vat",
        action="store_true",
        help="The amount is net; VAT is added on top.",
    )
    calc.add_argument(
        "--not-vat-registered",
        action="store_true",
        help="The company is not VAT registered; no VAT is taken.",
    )
    calc.add_argument(
        "--director",
        "-d",
        action="append",
        metavar="NAME[=PERCENT]",
        help="Add a director, optionally with a fixed split in percent. Repeat for each director.",
    )
    calc.add_argument(
        "--tier",
        choices=[t.value for t in DividendRateTier],
        default=DividendRateTier.BASIC.value,
        help="Dividend tax band applied to every director (default: basic).",
    )
    calc.add_argument(
        "--preset",
        choices=[p.value for p in DividendRatePreset],
        default=None,
        help="Dividend rate table to use instead of the configured one.",
    )
    calc.add_argument(
        "--custom-rate",
        default=None,
        help="Rate used by the custom tier, as a fraction (e.g. 0.15).",
    )
    source = calc.add_mutually_exclusive_group()
    source.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="YAML settings file overlaid on the defaults.",
    )
    _add_set_option(source)
    calc.add_argument(
        "--db",
        default=None,
        help=f"Planner store URL (default when saving: {DEFAULT_DATABASE_URL}).",
    )
    calc.add_argument(
        "--save",
        action="store_true",
        help="Store the settings and this deal as the last session.",
    )
    calc.set_defaults(func=cmd_calc)

    show = sub.add_parser(
        "show-settings",
        help="Print the stored settings, or a packaged settings set, as YAML.",
    )
    show.add_argument("--db", default=DEFAULT_DATABASE_URL, help="Planner store URL.")
    _add_set_option(show)
    show.set_defaults(func=cmd_show_settings)

    reset = sub.add_parser("reset-settings", help="Restore the default settings.")
    reset.add_argument("--db", default=DEFAULT_DATABASE_URL, help="Planner store URL.")
    reset.add_argument(
        "--all",
        action="store_true",
        help="Also forget the last session.",
    )
    reset.set_defaults(func=cmd_reset_settings)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    with LogContext.bind(correlation_id=str(uuid.uuid4()), command=args.command):
        try:
            return args.func(args)
        except DivvyPlanError as e:
            logger.warning("command_failed", exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except (FileNotFoundError, yaml.YAMLError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
