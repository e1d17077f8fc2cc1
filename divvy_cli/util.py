"""CLI utilities: director argument parsing, roster building, logging setup."""

import logging
from decimal import Decimal, InvalidOperation

from divvy_engines.redistribution import add_director, commit_split
from divvy_kernel.domain.values import Director
from divvy_kernel.exceptions import InvalidSplitPercentError
from divvy_kernel.logging_config import configure_logging


def parse_director_arg(text: str) -> tuple[str, Decimal | None]:
    """
    Split ``NAME[=PERCENT]`` into a name and a fraction.

    PERCENT is given in percent (``60`` or ``60%`` means 0.6).
    """
    name, sep, raw = text.partition("=")
    name = name.strip()
    if not sep:
        return name, None
    raw = raw.strip().rstrip("%")
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise InvalidSplitPercentError(name, raw) from None
    if not value.is_finite():
        raise InvalidSplitPercentError(name, raw)
    return name, value / 100


def build_roster(
    specs: list[tuple[str, Decimal | None]],
) -> tuple[tuple[Director, ...], frozenset[str]]:
    """
    Build a roster from parsed ``--director`` arguments.

    Directors with a percent are locked at it; the rest share what is left.
    Ids are assigned ``1``..``n`` in argument order.

    Returns:
        (roster, locked ids)
    """
    first_name, _ = specs[0]
    roster: tuple[Director, ...] = (
        Director(id="1", name=first_name or "Director 1", split_percent=Decimal("1")),
    )
    locked: frozenset[str] = frozenset()
    for index, (name, _) in enumerate(specs[1:], start=2):
        roster = add_director(roster, locked, str(index), name or None)

    for index, (_, percent) in enumerate(specs, start=1):
        if percent is not None:
            roster, locked = commit_split(roster, locked, str(index), percent)
    return roster, locked


def setup_logging(verbose: bool) -> None:
    """JSON logs to stderr; warnings only unless verbose."""
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING)
