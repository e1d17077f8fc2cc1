"""
Module: divvy_engines.redistribution
Responsibility:
    Keep a custom split roster summing to 100% while directors are added,
    removed or have their split set by hand. Directors whose split was set
    by hand are "locked"; the remaining share is spread evenly over the
    unlocked directors.

Architecture position:
    Engines -- pure roster helper, zero I/O. The set of locked ids is an
    explicit input and output; no state is kept between calls.

Invariants enforced:
    - A roster holds between MIN_DIRECTORS and MAX_DIRECTORS directors.
    - Locked directors keep their split; unlocked directors each receive
      max(0, 1 - sum(locked)) / unlocked_count.
    - Lock sets never reference directors outside the roster.
    - Director order is preserved; new directors are appended.

Failure modes:
    - DirectorLimitError when adding a 7th or removing the last director.
    - DirectorNotFoundError for an unknown director id.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from decimal import Decimal

from divvy_kernel.domain.values import Director
from divvy_kernel.exceptions import DirectorLimitError, DirectorNotFoundError
from divvy_kernel.logging_config import get_logger

logger = get_logger("engines.redistribution")

MIN_DIRECTORS = 1
MAX_DIRECTORS = 6

_ZERO = Decimal("0")
_ONE = Decimal("1")


def _require_known(directors: Sequence[Director], director_id: str) -> None:
    if all(d.id != director_id for d in directors):
        raise DirectorNotFoundError(director_id)


def _prune(locked_ids: Iterable[str], directors: Sequence[Director]) -> frozenset[str]:
    present = {d.id for d in directors}
    return frozenset(i for i in locked_ids if i in present)


def redistribute(
    directors: Sequence[Director],
    locked_ids: Iterable[str] = (),
) -> tuple[Director, ...]:
    """
    Spread the share not held by locked directors evenly over the rest.

    Returns:
        New roster in the same order. If every director is locked the
        roster is returned unchanged.
    """
    locked = _prune(locked_ids, directors)
    locked_total = sum(
        (d.split_percent for d in directors if d.id in locked), _ZERO
    )
    unlocked_count = sum(1 for d in directors if d.id not in locked)
    if unlocked_count == 0:
        return tuple(directors)

    remaining = max(_ZERO, _ONE - locked_total)
    per_unlocked = remaining / unlocked_count

    return tuple(
        d if d.id in locked else replace(d, split_percent=per_unlocked)
        for d in directors
    )


def add_director(
    directors: Sequence[Director],
    locked_ids: Iterable[str],
    new_id: str,
    name: str | None = None,
) -> tuple[Director, ...]:
    """
    Append a director and rebalance the unlocked splits.

    The new director is unlocked and named ``Director <n>`` unless a name
    is given.
    """
    if len(directors) >= MAX_DIRECTORS:
        raise DirectorLimitError(len(directors) + 1, MIN_DIRECTORS, MAX_DIRECTORS)

    newcomer = Director(
        id=new_id,
        name=name or f"Director {len(directors) + 1}",
        split_percent=_ZERO,
    )
    roster = redistribute([*directors, newcomer], locked_ids)

    logger.info("director_added", extra={
        "director_id": new_id,
        "director_count": len(roster),
    })
    return roster


def remove_director(
    directors: Sequence[Director],
    locked_ids: Iterable[str],
    director_id: str,
) -> tuple[tuple[Director, ...], frozenset[str]]:
    """
    Remove a director, release its lock and rebalance the unlocked splits.

    Returns:
        (new roster, pruned locked ids)
    """
    _require_known(directors, director_id)
    if len(directors) <= MIN_DIRECTORS:
        raise DirectorLimitError(len(directors) - 1, MIN_DIRECTORS, MAX_DIRECTORS)

    remaining = [d for d in directors if d.id != director_id]
    locked = _prune(locked_ids, remaining)
    roster = redistribute(remaining, locked)

    logger.info("director_removed", extra={
        "director_id": director_id,
        "director_count": len(roster),
    })
    return roster, locked


def commit_split(
    directors: Sequence[Director],
    locked_ids: Iterable[str],
    director_id: str,
    percent: Decimal | int | str | float,
) -> tuple[tuple[Director, ...], frozenset[str]]:
    """
    Set one director's split by hand, lock it and rebalance the others.

    ``percent`` is a fraction; out-of-range input is clamped to [0, 1] as the
    form layer does when a user types past the limits.

    Returns:
        (new roster, locked ids including director_id)
    """
    _require_known(directors, director_id)
    value = percent if isinstance(percent, Decimal) else Decimal(str(percent))
    clamped = min(_ONE, max(_ZERO, value))

    locked = _prune(locked_ids, directors) | {director_id}
    updated = [
        replace(d, split_percent=clamped) if d.id == director_id else d
        for d in directors
    ]
    return redistribute(updated, locked), locked

