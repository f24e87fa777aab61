"""
Repacking of a whole canvas after a drag or resize.

Every card is pushed upward into the first gap that fits it. One card
may be pinned: it keeps its exact position and the others pack around it.
Pure functions over plain values, no engine-owned state.
"""
import bisect
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..data_models import GridItem

logger = logging.getLogger(__name__)

Range = Tuple[float, float]


def find_first_fit(occupied: Sequence[Range], height: float, start: float = 0.0) -> float:
    """
    Find the first row where an interval of ``height`` fits.

    Args:
        occupied: Occupied ``(start, end)`` ranges sorted by start
        height: Length of the interval to place
        start: Lowest acceptable row

    Returns:
        First row >= ``start`` whose ``[row, row + height)`` intersects no range
    """
    candidate = start
    for range_start, range_end in occupied:
        if range_end <= candidate:
            continue
        if range_start >= candidate + height:
            # Ranges are sorted, nothing further can overlap
            break
        candidate = range_end
    return candidate


def _occupy(timeline: List[Range], row: float, height: float) -> None:
    if height <= 0:
        return
    bisect.insort(timeline, (row, row + height))


def reflow(items: Sequence[GridItem], pinned_id: Optional[str] = None) -> List[GridItem]:
    """
    Repack all items from the top, eliminating vertical gaps.

    Items are visited in order of their current row; ties keep their input
    order. Full-width items search the union of both columns and anchor
    column 0. Single-column items take whichever column offers the earlier
    row, column 0 on ties.

    Args:
        items: Full item collection of one canvas (not modified)
        pinned_id: Id of an item whose exact position must be preserved

    Returns:
        New list of copied items, the pinned item last
    """
    columns: Dict[int, List[Range]] = {0: [], 1: []}
    pinned: Optional[GridItem] = None
    to_pack: List[GridItem] = []

    for item in items:
        if pinned_id is not None and pinned is None and item.id == pinned_id:
            pinned = item.copy()
        else:
            to_pack.append(item)

    if pinned_id is not None and pinned is None:
        logger.debug("Pinned item %s not in collection, reflowing without pin", pinned_id)

    if pinned is not None:
        pinned_height = max(pinned.height, 0.0)
        pinned_columns = (0, 1) if pinned.is_full_width else (pinned.column,)
        for col in pinned_columns:
            if col in columns:
                _occupy(columns[col], pinned.row, pinned_height)

    result: List[GridItem] = []
    for item in sorted(to_pack, key=lambda it: it.row):
        placed = item.copy()
        height = max(placed.height, 0.0)

        if placed.is_full_width:
            merged = sorted(columns[0] + columns[1])
            row = find_first_fit(merged, height)
            placed.column = 0
            placed.row = row
            _occupy(columns[0], row, height)
            _occupy(columns[1], row, height)
        else:
            left = find_first_fit(columns[0], height)
            right = find_first_fit(columns[1], height)
            column = 0 if left <= right else 1
            placed.column = column
            placed.row = left if column == 0 else right
            _occupy(columns[column], placed.row, height)

        result.append(placed)

    if pinned is not None:
        result.append(pinned)

    return result


def find_overlaps(items: Sequence[GridItem]) -> List[Tuple[str, str]]:
    """
    Find pairs of items that share a column and intersect vertically.

    Args:
        items: Items to check

    Returns:
        List of ``(id_a, id_b)`` pairs, empty for a valid layout
    """
    overlaps: List[Tuple[str, str]] = []
    for i, first in enumerate(items):
        for second in items[i + 1:]:
            if not first.columns & second.columns:
                continue
            if first.row < second.end_row and second.row < first.end_row:
                overlaps.append((first.id, second.id))
    return overlaps
