"""
Tests for roster redistribution.

Covers:
- Even redistribution over unlocked directors
- Adding and removing directors within the 1..6 limit
- Committing a hand-set split (clamped, locked)
"""

from decimal import Decimal

import pytest

from divvy_engines.redistribution import (
    MAX_DIRECTORS,
    add_director,
    commit_split,
    redistribute,
    remove_director,
)
from divvy_engines.split_validation import is_valid_split
from divvy_kernel.domain.values import Director
from divvy_kernel.exceptions import DirectorLimitError, DirectorNotFoundError


def _roster(count: int) -> tuple[Director, ...]:
    return tuple(
        Director(id=str(i), name=f"Director {i}", split_percent=Decimal("1") / count)
        for i in range(1, count + 1)
    )


class TestRedistribute:

    def test_no_locks_even_split(self):
        roster = redistribute(_roster(4))
        assert [d.split_percent for d in roster] == [Decimal("0.25")] * 4

    def test_locked_keep_their_split(self):
        roster = (
            Director(id="1", name="A", split_percent="0.5"),
            Director(id="2", name="B", split_percent="0"),
            Director(id="3", name="C", split_percent="0"),
        )
        result = redistribute(roster, {"1"})
        assert [d.split_percent for d in result] == [
            Decimal("0.5"), Decimal("0.25"), Decimal("0.25"),
        ]

    def test_locked_over_hundred_leaves_zero(self):
        roster = (
            Director(id="1", name="A", split_percent="0.7"),
            Director(id="2", name="B", split_percent="0.6"),
            Director(id="3", name="C", split_percent="0.2"),
        )
        result = redistribute(roster, {"1", "2"})
        assert result[2].split_percent == Decimal("0")

    def test_all_locked_unchanged(self):
        roster = (
            Director(id="1", name="A", split_percent="0.3"),
            Director(id="2", name="B", split_percent="0.3"),
        )
        assert redistribute(roster, {"1", "2"}) == roster

    def test_unknown_locked_ids_ignored(self):
        result = redistribute(_roster(2), {"99"})
        assert [d.split_percent for d in result] == [Decimal("0.5"), Decimal("0.5")]


class TestAddDirector:

    def test_appends_with_default_name(self):
        roster = add_director(_roster(1), frozenset(), "2")
        assert [d.name for d in roster] == ["Director 1", "Director 2"]
        assert [d.split_percent for d in roster] == [Decimal("0.5"), Decimal("0.5")]

    def test_explicit_name(self):
        roster = add_director(_roster(1), frozenset(), "x", name="Xena")
        assert roster[-1].name == "Xena"
        assert roster[-1].id == "x"

    def test_keeps_locked_split(self):
        roster, locked = commit_split(_roster(2), frozenset(), "1", "0.6")
        roster = add_director(roster, locked, "3")
        assert [d.split_percent for d in roster] == [
            Decimal("0.6"), Decimal("0.2"), Decimal("0.2"),
        ]

    def test_seventh_director_rejected(self):
        with pytest.raises(DirectorLimitError) as exc_info:
            add_director(_roster(MAX_DIRECTORS), frozenset(), "7")
        assert exc_info.value.count == 7
        assert exc_info.value.maximum == 6

    def test_logs_addition(self, captured_logs):
        add_director(_roster(1), frozenset(), "2")
        records = [r for r in captured_logs() if r["message"] == "director_added"]
        assert records[0]["director_count"] == 2


class TestRemoveDirector:

    def test_rebalances_and_prunes_lock(self):
        roster, locked = commit_split(_roster(3), frozenset(), "2", "0.5")
        roster, locked = remove_director(roster, locked, "2")
        assert [d.id for d in roster] == ["1", "3"]
        assert locked == frozenset()
        assert [d.split_percent for d in roster] == [Decimal("0.5"), Decimal("0.5")]

    def test_last_director_cannot_be_removed(self):
        with pytest.raises(DirectorLimitError):
            remove_director(_roster(1), frozenset(), "1")

    def test_unknown_director(self):
        with pytest.raises(DirectorNotFoundError) as exc_info:
            remove_director(_roster(2), frozenset(), "nope")
        assert exc_info.value.code == "DIRECTOR_NOT_FOUND"


class TestCommitSplit:

    def test_locks_and_redistributes(self):
        roster, locked = commit_split(_roster(3), frozenset(), "1", Decimal("0.5"))
        assert locked == frozenset({"1"})
        assert [d.split_percent for d in roster] == [
            Decimal("0.5"), Decimal("0.25"), Decimal("0.25"),
        ]
        assert is_valid_split(roster)

    @pytest.mark.parametrize("raw,expected", [("1.5", Decimal("1")), ("-0.2", Decimal("0"))])
    def test_clamped_to_unit_interval(self, raw, expected):
        roster, _ = commit_split(_roster(2), frozenset(), "1", raw)
        assert roster[0].split_percent == expected

    def test_second_commit_keeps_first_lock(self):
        roster, locked = commit_split(_roster(3), frozenset(), "1", "0.5")
        roster, locked = commit_split(roster, locked, "2", "0.3")
        assert locked == frozenset({"1", "2"})
        assert roster[2].split_percent == Decimal("0.2")

    def test_unknown_director(self):
        with pytest.raises(DirectorNotFoundError):
            commit_split(_roster(2), frozenset(), "9", "0.5")
