"""Layout calculator, hit-testing and drop snapping."""
import pytest

from tripcanvas.data_models import Canvas, GridItem
from tripcanvas.ui_logic.grid_layout import BOTTOM_PADDING, GridLayout, calculate_layout

# column width = (390 - 32 - 10) / 2 = 174, row stride = 110
CANVAS = Canvas(pixel_width=390)


def test_empty_canvas_returns_empty_layout():
    items = [GridItem("a", 0, 0, 1, 1)]
    assert calculate_layout(items, Canvas(pixel_width=0)) == {}
    assert calculate_layout(items, Canvas(pixel_width=-10)) == {}


def test_single_column_item_geometry():
    layouts = calculate_layout([GridItem("a", 1, 2, 1, 1.5)], CANVAS)
    layout = layouts["a"]
    assert layout.x == pytest.approx(16 + 174 + 10)
    assert layout.y == pytest.approx(220)
    assert layout.width == pytest.approx(174)
    assert layout.height == pytest.approx(1.5 * 110 - 10)
    assert layout.stack_order == 0


def test_full_width_item_spans_both_columns():
    layout = calculate_layout([GridItem("hero", 0, 0, 2, 2)], CANVAS)["hero"]
    assert layout.x == pytest.approx(16)
    assert layout.width == pytest.approx(2 * 174 + 10)
    assert layout.right == pytest.approx(390 - 16)
    assert layout.height == pytest.approx(210)


def test_stack_order_follows_input_sequence():
    items = [GridItem("a"), GridItem("b", 1), GridItem("c", 0, 1)]
    layouts = calculate_layout(items, CANVAS)
    assert [layouts[i.id].stack_order for i in items] == [0, 1, 2]


def test_hit_test_prefers_top_most_item():
    grid = GridLayout(CANVAS)
    # Overlapping items: "b" is drawn on top of "a"
    items = [GridItem("a", 0, 0, 1, 2), GridItem("b", 0, 1, 1, 1)]
    assert grid.find_item_at_position(50, 150, items) == "b"
    assert grid.find_item_at_position(50, 50, items) == "a"


def test_hit_test_misses_spacing_and_empty_space():
    grid = GridLayout(CANVAS)
    items = [GridItem("a", 0, 0, 1, 1), GridItem("b", 1, 0, 1, 1)]
    assert grid.find_item_at_position(195, 50, items) is None  # column gap
    assert grid.find_item_at_position(50, 105, items) is None  # row gap
    assert grid.find_item_at_position(8, 50, items) is None    # side margin
    assert grid.find_item_at_position(250, 50, items) == "b"


def test_pixel_to_grid_snaps_row_and_column():
    grid = GridLayout(CANVAS)
    item = GridItem("a", 0, 0, 1, 1)

    snapped = grid.pixel_to_grid(200, 160, item)
    assert (snapped.column, snapped.row) == (1, 1.5)

    snapped = grid.pixel_to_grid(30, 50, item)
    assert (snapped.column, snapped.row) == (0, 0.5)

    # 27.5px is exactly a quarter row and rounds up to the half row
    snapped = grid.pixel_to_grid(30, 27.5, item)
    assert snapped.row == 0.5


def test_pixel_to_grid_clamps_above_top():
    grid = GridLayout(CANVAS)
    snapped = grid.pixel_to_grid(16, -400, GridItem("a", 0, 3, 1, 1))
    assert snapped.row == 0


def test_pixel_to_grid_forces_full_width_to_column_zero():
    grid = GridLayout(CANVAS)
    snapped = grid.pixel_to_grid(300, 0, GridItem("hero", 0, 0, 2, 2))
    assert snapped.column == 0
    assert (snapped.width, snapped.height) == (2, 2)


def test_content_height_adds_bottom_padding():
    grid = GridLayout(CANVAS)
    items = [GridItem("a", 0, 0, 1, 1), GridItem("b", 1, 1, 1, 2)]
    assert grid.content_height(items) == pytest.approx(3 * 110 - 10 + BOTTOM_PADDING)
    assert GridLayout(Canvas(0)).content_height(items) == 0
