"""Tests for resolving tier and insert-before selections to target priorities."""

from __future__ import annotations

from nextpvr_api import RecurringTimer
from placement_resolver import NO_CHANGE, Placement, resolve_placement
from priority_index import ExplicitPriority, PriorityIndex, PriorityTier


def _index(*priorities: int) -> PriorityIndex:
    return PriorityIndex.build(
        RecurringTimer(id=i + 1, priority=p, name=f"Show {i + 1}")
        for i, p in enumerate(priorities)
    )


def test_insert_before_occupied_neighbour() -> None:
    index = _index(1, 2, 3, 4, 5)

    placement = resolve_placement(index, ExplicitPriority(3), owner_id=10)

    assert placement == Placement(requires_move=True, target=2)


def test_selection_not_found_skips_gap_search() -> None:
    index = _index(1, 2, 3, 4, 5)

    def _fail(priority: int) -> int:
        raise AssertionError("search_gap must not be called")

    index.search_gap = _fail

    placement = resolve_placement(index, ExplicitPriority(42), owner_id=10)

    assert placement.requires_move is False
    assert placement.target == 42


def test_selecting_own_priority_is_noop() -> None:
    index = _index(1, 2, 3, 4, 5)

    assert resolve_placement(index, ExplicitPriority(3), owner_id=3) == NO_CHANGE


def test_default_is_noop() -> None:
    index = _index(1, 2, 3)

    assert resolve_placement(index, PriorityTier.DEFAULT, owner_id=2) == NO_CHANGE


def test_same_tier_is_noop() -> None:
    index = _index(1, 2, 3, 4, 5)

    assert resolve_placement(index, PriorityTier.IMPORTANT, owner_id=1) == NO_CHANGE
    assert resolve_placement(index, PriorityTier.UNIMPORTANT, owner_id=5) == NO_CHANGE


def test_empty_tier_is_noop() -> None:
    index = _index(1, 2, 3, 4, 5)

    assert resolve_placement(index, PriorityTier.LOW, owner_id=1) == NO_CHANGE


def test_important_with_room_at_the_top() -> None:
    index = _index(5, 6, 7, 8, 9)

    placement = resolve_placement(index, PriorityTier.IMPORTANT, owner_id=5)

    # anchor 5 -> 4, then half of the free range 1..4
    assert placement == Placement(requires_move=True, target=2)


def test_important_without_room_targets_one() -> None:
    index = _index(1, 2, 3, 4, 5)

    placement = resolve_placement(index, PriorityTier.IMPORTANT, owner_id=4)

    assert placement == Placement(requires_move=True, target=1)


def test_unimportant_targets_last_priority() -> None:
    index = _index(1, 2, 3, 4, 5)

    placement = resolve_placement(index, PriorityTier.UNIMPORTANT, owner_id=2)

    assert placement == Placement(requires_move=True, target=5)


def test_group_tier_uses_gap_above_anchor() -> None:
    index = _index(1, 10, 20, 30, 40, 50)

    placement = resolve_placement(index, PriorityTier.NORMAL, owner_id=6)

    # first free value below the anchor is 19, gap reaches up to 11
    assert placement == Placement(requires_move=True, target=15)
    assert placement.target not in index


def test_group_tier_without_gap_targets_anchor() -> None:
    index = _index(1, 2, 3, 4, 5)

    placement = resolve_placement(index, PriorityTier.HIGH, owner_id=5)

    assert placement == Placement(requires_move=True, target=2)


def test_explicit_first_position() -> None:
    index = _index(1, 2, 3)

    placement = resolve_placement(index, ExplicitPriority(1), owner_id=3)

    assert placement == Placement(requires_move=True, target=1)


def test_explicit_selection_prefers_nearby_gap() -> None:
    index = _index(1, 10, 11)

    placement = resolve_placement(index, ExplicitPriority(11), owner_id=2)

    # target 10 is occupied, but 2..9 are free above it
    assert placement == Placement(requires_move=True, target=6)

    placement = resolve_placement(index, ExplicitPriority(10), owner_id=3)

    # 9 is free, gap runs up to 2
    assert placement == Placement(requires_move=True, target=5)


def test_new_timer_unimportant_means_default() -> None:
    index = _index(1, 2, 3, 4, 5)

    placement = resolve_placement(index, PriorityTier.UNIMPORTANT, owner_id=None, is_new=True)

    assert placement == NO_CHANGE


def test_new_timer_gets_tier_target() -> None:
    index = _index(1, 2, 3, 4, 5)

    placement = resolve_placement(index, PriorityTier.IMPORTANT, owner_id=None, is_new=True)

    assert placement == Placement(requires_move=True, target=1)
