"""
Grid mathematics for the 2-column masonry canvas.

Convert grid positions to pixel rectangles, hit-test pointer coordinates
and snap dropped pixel positions back onto the grid. No UI framework
dependencies.
"""
from typing import Dict, Iterable, Optional, Sequence

from ..data_models import Canvas, GridItem, MomentLayout, snap_half

BOTTOM_PADDING = 100


def calculate_layout(items: Iterable[GridItem], canvas: Canvas) -> Dict[str, MomentLayout]:
    """
    Calculate pixel layouts for grid items.

    Pure and deterministic. Returns an empty mapping while the canvas width
    is not known yet (``pixel_width <= 0``); that is a transient state, not
    an error.

    Args:
        items: Items in stacking order (later items draw on top)
        canvas: Canvas geometry

    Returns:
        Mapping of item id to MomentLayout
    """
    layouts: Dict[str, MomentLayout] = {}
    if not canvas.is_ready:
        return layouts

    column_width = canvas.column_width
    stride = canvas.row_stride

    for index, item in enumerate(items):
        x = canvas.side_margin + item.column * (column_width + canvas.column_spacing)
        y = item.row * stride
        width = item.width * column_width + (item.width - 1) * canvas.column_spacing
        height = item.height * stride - canvas.row_spacing

        layouts[item.id] = MomentLayout(
            x=x,
            y=y,
            width=width,
            height=height,
            stack_order=index,
        )

    return layouts


class GridLayout:
    """
    Layout calculations for a canvas of moment cards.

    Wraps the pure layout function with hit-testing and drop snapping.
    Holds only the geometry it was given; the item collection is always
    passed in by the caller.
    """

    def __init__(self, canvas: Canvas) -> None:
        """
        Initialize grid layout with the given geometry.

        Args:
            canvas: Canvas geometry
        """
        self.canvas = canvas

    def calculate(self, items: Sequence[GridItem]) -> Dict[str, MomentLayout]:
        return calculate_layout(items, self.canvas)

    def find_item_at_position(self, x: float, y: float, items: Sequence[GridItem]) -> Optional[str]:
        """
        Find the item under a pixel coordinate.

        Args:
            x: X coordinate (pixel)
            y: Y coordinate (pixel)
            items: Items in stacking order

        Returns:
            Id of the top-most item containing the point, None if no item
        """
        layouts = self.calculate(items)
        found: Optional[str] = None
        top_order = -1
        for item_id, layout in layouts.items():
            if layout.contains(x, y) and layout.stack_order > top_order:
                found = item_id
                top_order = layout.stack_order
        return found

    def pixel_to_grid(self, x: float, y: float, item: GridItem) -> GridItem:
        """
        Snap a dropped card's top-left pixel position onto the grid.

        The column is chosen from the card's horizontal centre relative to
        the canvas midpoint; full-width cards always anchor column 0. The
        row snaps to the nearest 0.5 unit and never goes above the top.

        Args:
            x: Left edge of the card after the drag (pixel)
            y: Top edge of the card after the drag (pixel)
            item: The dragged item, supplying width and height

        Returns:
            New GridItem with the snapped position and the item's size
        """
        if item.is_full_width:
            column = 0
        else:
            card_width = self.canvas.column_width
            center_x = x + card_width / 2
            column = 0 if center_x < self.canvas.midpoint else 1

        raw_row = y / self.canvas.row_stride if self.canvas.row_stride > 0 else 0.0
        row = max(0.0, snap_half(raw_row))

        return GridItem(
            id=item.id,
            column=column,
            row=row,
            width=item.width,
            height=item.height,
        )

    def content_height(self, items: Sequence[GridItem]) -> float:
        """
        Calculate the scrollable height needed for the items.

        Args:
            items: Items to display

        Returns:
            Bottom of the lowest card plus padding, 0 when there is no layout
        """
        layouts = self.calculate(items)
        if not layouts:
            return 0
        max_y = max(layout.bottom for layout in layouts.values())
        return max_y + BOTTOM_PADDING

    def update_canvas(self, new_canvas: Canvas) -> None:
        """
        Update canvas geometry (e.g. after the view reports real dimensions).

        Args:
            new_canvas: New canvas geometry
        """
        self.canvas = new_canvas
