"""Insertion-time placement."""
import random

from tripcanvas.data_models import GridItem, MomentImportance
from tripcanvas.ui_logic.allocator import (
    column_ends,
    default_size,
    next_grid_position,
    next_position_for_importance,
)
from tripcanvas.ui_logic.reflow import find_overlaps


def test_first_items_fill_left_then_right():
    first = next_grid_position([], "a", 1, 1)
    assert first.position() == (0, 0, 1, 1)

    second = next_grid_position([first], "b", 1, 1)
    assert second.position() == (1, 0, 1, 1)

    third = next_grid_position([first, second], "c", 1, 1)
    assert third.position() == (0, 1, 1, 1)


def test_full_width_starts_below_both_columns():
    existing = [GridItem("a", 0, 0, 1, 1), GridItem("b", 1, 0, 1, 2.5)]
    placed = next_grid_position(existing, "hero", 2, 2)
    assert placed.position() == (0, 2.5, 2, 2)


def test_full_width_item_raises_both_column_ends():
    existing = [GridItem("hero", 0, 0, 2, 2), GridItem("a", 0, 2, 1, 1)]
    assert column_ends(existing) == [3, 2]
    assert next_grid_position(existing, "b", 1, 1).position() == (1, 2, 1, 1)


def test_interior_gaps_are_not_reused():
    # Gap at column 0 rows 0-2 stays empty, new item goes to the end
    existing = [GridItem("a", 0, 2, 1, 1), GridItem("b", 1, 0, 1, 4)]
    assert next_grid_position(existing, "c", 1, 1).position() == (0, 3, 1, 1)


def test_importance_sizes():
    assert default_size(MomentImportance.SMALL) == (1, 1.0)
    assert default_size(MomentImportance.MEDIUM) == (1, 1.5)
    assert default_size(MomentImportance.LARGE) == (1, 2.0)
    assert default_size(MomentImportance.HERO) == (2, 2.0)

    hero = next_position_for_importance([GridItem("a", 1, 0, 1, 1)], "h", MomentImportance.HERO)
    assert hero.position() == (0, 1, 2, 2)


def test_appending_never_lowers_column_ends_or_overlaps():
    rng = random.Random(1234)
    items = []
    previous = [0.0, 0.0]
    for i in range(60):
        width = 2 if rng.random() < 0.2 else 1
        height = rng.choice([0.5, 1, 1.5, 2, 2.5, 3])
        items.append(next_grid_position(items, f"m{i}", width, height))

        ends = column_ends(items)
        assert ends[0] >= previous[0]
        assert ends[1] >= previous[1]
        previous = ends
        assert find_overlaps(items) == []
