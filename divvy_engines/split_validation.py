"""Custom split validation."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from divvy_kernel.domain.values import Director

SPLIT_TOLERANCE = Decimal("0.0001")


def total_split(directors: Sequence[Director]) -> Decimal:
    """Sum of the directors' split fractions."""
    return sum((d.split_percent for d in directors), Decimal("0"))


def is_valid_split(directors: Sequence[Director]) -> bool:
    """
    True if the custom split fractions add up to 100%.

    An empty roster is never valid. The check gates form actions only; the
    allocation engine splits whatever fractions it is given.
    """
    if not directors:
        return False
    return abs(total_split(directors) - Decimal("1")) < SPLIT_TOLERANCE
