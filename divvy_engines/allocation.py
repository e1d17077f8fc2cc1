"""
Module: divvy_engines.allocation
Responsibility:
    Split a dividend pool among an ordered list of directors into whole
    pence, using either the equal or the custom (proportional) method.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import divvy_kernel/domain.

Invariants enforced:
    - Conservation: the shares always sum to to_pence(pool) exactly. No
      penny is created or lost for any director count or split.
    - Equal method: base = P // N; the first P - base*N directors in input
      order receive base + 1. This is the allocation policy, not a
      correction, so it never reports a rounding adjustment.
    - Custom method: each share is round(P * split_percent); the whole
      difference P - sum(shares) is added to the last director. The
      difference is reported as rounding_adjustment.
    - Output order matches input order; identical inputs give identical
      shares.

Failure modes:
    - None for valid value objects. An empty director list yields an
      empty allocation; splits that do not sum to 1 are still allocated,
      with the last director absorbing the shortfall or excess.

Usage:
    from divvy_engines.allocation import split_pool
    from divvy_kernel.domain.values import Director, SplitMethod

    split_pool(
        pool=Decimal("100.00"),
        directors=[Director("1", "A"), Director("2", "B"), Director("3", "C")],
        method=SplitMethod.EQUAL,
    )  # [3334, 3333, 3333]
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from divvy_engines.tracer import traced_engine
from divvy_kernel.domain.money import from_pence, round_pence, to_pence
from divvy_kernel.domain.values import Director, SplitMethod
from divvy_kernel.logging_config import get_logger

logger = get_logger("engines.allocation")


@dataclass(frozen=True)
class PoolAllocation:
    """
    Result of splitting a pool.

    Contract:
        Frozen dataclass summarising one split.
    Guarantees:
        - ``sum(shares) == pool_pence`` (conservation).
        - ``rounding_adjustment`` is the pence added to (or taken from) the
          last share by the custom method; always 0 for the equal method.
    """

    pool_pence: int
    method: SplitMethod
    shares: tuple[int, ...]
    rounding_adjustment: int = 0

    @property
    def total_allocated(self) -> int:
        return sum(self.shares)

    @property
    def was_adjusted(self) -> bool:
        """True if the custom method had to correct the last share."""
        return self.rounding_adjustment != 0

    def shares_in_pounds(self) -> tuple[Decimal, ...]:
        return tuple(from_pence(s) for s in self.shares)


def _allocate_equal(pool_pence: int, count: int) -> tuple[int, ...]:
    base, remainder = divmod(pool_pence, count)
    return tuple(base + 1 if i < remainder else base for i in range(count))


def _allocate_custom(
    pool_pence: int,
    directors: Sequence[Director],
) -> tuple[tuple[int, ...], int]:
    shares = [round_pence(pool_pence * d.split_percent) for d in directors]
    # INVARIANT: the whole rounding difference lands on the last director
    diff = pool_pence - sum(shares)
    shares[-1] += diff
    return tuple(shares), diff


@traced_engine("allocation", "1.0", fingerprint_fields=("pool", "directors", "method"))
def allocate_pool(
    pool: Decimal,
    directors: Sequence[Director],
    method: SplitMethod,
) -> PoolAllocation:
    """
    Allocate a pool to directors and report any custom-split correction.

    Args:
        pool: Dividend pool in pounds (non-negative).
        directors: Recipients, in display order.
        method: Equal or custom split.

    Returns:
        PoolAllocation with one pence share per director.
    """
    method = SplitMethod(method)
    pool_pence = to_pence(pool)

    if not directors:
        logger.warning("allocation_no_directors", extra={
            "pool_pence": pool_pence,
            "method": method.value,
        })
        return PoolAllocation(pool_pence=pool_pence, method=method, shares=())

    if method == SplitMethod.EQUAL:
        shares = _allocate_equal(pool_pence, len(directors))
        adjustment = 0
    else:
        shares, adjustment = _allocate_custom(pool_pence, directors)

    # INVARIANT: conservation -- shares reconstruct the pool exactly
    assert sum(shares) == pool_pence, (
        f"Allocation conservation violated: {sum(shares)} != {pool_pence}"
    )

    logger.debug("allocation_completed", extra={
        "method": method.value,
        "pool_pence": pool_pence,
        "director_count": len(directors),
        "rounding_adjustment": adjustment,
    })

    return PoolAllocation(
        pool_pence=pool_pence,
        method=method,
        shares=shares,
        rounding_adjustment=adjustment,
    )


def split_pool(
    pool: Decimal,
    directors: Sequence[Director],
    method: SplitMethod,
) -> list[int]:
    """
    Split a pool into integer pence shares, one per director.

    The shares sum exactly to ``to_pence(pool)``. See ``allocate_pool`` for
    the rounding adjustment of the custom method.
    """
    return list(allocate_pool(pool, directors, method).shares)
