"""
Insertion-time placement for newly created moments.

Append-only: a new card goes below everything already in its column(s).
Interior gaps are left for the reflow pass to reclaim.
"""
from typing import Iterable, List

from ..data_models import IMPORTANCE_SIZES, GridItem, MomentImportance


def column_ends(items: Iterable[GridItem]) -> List[float]:
    """
    Calculate where each column currently ends.

    Args:
        items: Placed items

    Returns:
        ``[end_of_column_0, end_of_column_1]`` in row units
    """
    ends = [0.0, 0.0]
    for item in items:
        end_row = item.row + item.height
        if item.is_full_width:
            ends[0] = max(ends[0], end_row)
            ends[1] = max(ends[1], end_row)
        elif item.column in (0, 1):
            ends[item.column] = max(ends[item.column], end_row)
    return ends


def next_grid_position(existing: Iterable[GridItem], item_id: str, width: int, height: float) -> GridItem:
    """
    Calculate the position of a new item appended to the canvas.

    Full-width items start after both columns are clear. Single-column
    items go to the shorter column, column 0 on ties.

    Args:
        existing: Items already on the canvas
        item_id: Id of the new item
        width: Width of the new item in columns
        height: Height of the new item in row units

    Returns:
        New GridItem placed below the existing items
    """
    ends = column_ends(existing)

    if width >= 2:
        return GridItem(id=item_id, column=0, row=max(ends), width=width, height=height)

    column = 0 if ends[0] <= ends[1] else 1
    return GridItem(id=item_id, column=column, row=ends[column], width=1, height=height)


def default_size(importance: MomentImportance) -> tuple[int, float]:
    """Default (width, height) footprint for a moment of the given importance."""
    return IMPORTANCE_SIZES[importance]


def next_position_for_importance(existing: Iterable[GridItem], item_id: str,
                                 importance: MomentImportance) -> GridItem:
    width, height = default_size(importance)
    return next_grid_position(existing, item_id, width, height)
