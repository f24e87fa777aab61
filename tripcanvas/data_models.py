"""Core data structures for the trip canvas.

Contains the grid footprint of a moment card, the canvas geometry and the
derived pixel layout. No UI framework dependencies.
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Tuple

logger = logging.getLogger(__name__)

MIN_HEIGHT = 0.5


def snap_half(value: float) -> float:
    """Round to the nearest 0.5 row unit, halves rounding up."""
    return math.floor(value * 2 + 0.5) / 2


@dataclass
class GridItem:
    """Placement of one moment card in the 2-column grid."""
    id: str
    column: int = 0
    row: float = 0.0
    width: int = 1
    height: float = 1.0

    @property
    def end_row(self) -> float:
        return self.row + self.height

    @property
    def is_full_width(self) -> bool:
        return self.width >= 2

    @property
    def columns(self) -> FrozenSet[int]:
        """Columns covered by this item."""
        if self.is_full_width:
            return frozenset((0, 1))
        return frozenset((self.column,))

    def copy(self) -> 'GridItem':
        return GridItem(self.id, self.column, self.row, self.width, self.height)

    def position(self) -> Tuple[int, float, int, float]:
        return (self.column, self.row, self.width, self.height)

    def grid_position(self) -> Dict[str, Any]:
        """Numeric fields as stored by the document store."""
        return {
            "column": self.column,
            "row": self.row,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'GridItem':
        """
        Build an item from a stored record.

        Accepts the flat form ``{"id", "column", ...}`` and the moment
        document form ``{"momentId", "gridPosition": {...}}``.

        Raises:
            ValueError: If the record is not a mapping, has no id or holds a
                non-finite number
        """
        if not isinstance(record, dict):
            raise ValueError(f"Record is not an object: {record!r}")
        item_id = record.get("momentId") or record.get("id")
        if not item_id:
            raise ValueError(f"Record has no moment id: {record!r}")
        pos = record.get("gridPosition") or record
        if not isinstance(pos, dict):
            raise ValueError(f"Grid position of {item_id} is not an object: {pos!r}")

        values = {}
        for name, default in (("column", 0), ("row", 0.0), ("width", 1), ("height", 1.0)):
            value = float(pos.get(name, default))
            if not math.isfinite(value):
                raise ValueError(f"Grid position of {item_id} has non-finite {name}: {value}")
            values[name] = value

        return cls(
            id=str(item_id),
            column=int(values["column"]),
            row=values["row"],
            width=int(values["width"]),
            height=values["height"],
        )

    def __str__(self) -> str:
        return (f"GridItem({self.id}: col={self.column}, row={self.row}, "
                f"w={self.width}, h={self.height})")


@dataclass(frozen=True, slots=True)
class Canvas:
    """Read-only canvas geometry, supplied by the caller on every layout pass."""
    pixel_width: float
    column_count: int = 2
    side_margin: float = 16
    column_spacing: float = 10
    row_spacing: float = 10
    unit_row_height: float = 100

    @property
    def column_width(self) -> float:
        """Pixel width of a single column."""
        available = self.pixel_width - (self.side_margin * 2) - self.column_spacing
        return available / self.column_count

    @property
    def row_stride(self) -> float:
        """Vertical pixels per row unit, spacing included."""
        return self.unit_row_height + self.row_spacing

    @property
    def midpoint(self) -> float:
        return self.pixel_width / 2

    @property
    def is_ready(self) -> bool:
        """False until real dimensions are known."""
        return self.pixel_width > 0


@dataclass(frozen=True, slots=True)
class MomentLayout:
    """Pixel rectangle for one card. Derived on every pass, never persisted."""
    x: float
    y: float
    width: float
    height: float
    stack_order: int

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom


class MomentImportance(Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HERO = "hero"


# (width, height) footprint of a newly created moment
IMPORTANCE_SIZES: Dict[MomentImportance, Tuple[int, float]] = {
    MomentImportance.SMALL: (1, 1.0),
    MomentImportance.MEDIUM: (1, 1.5),
    MomentImportance.LARGE: (1, 2.0),
    MomentImportance.HERO: (2, 2.0),
}


def normalize_item(item: GridItem) -> GridItem:
    """
    Return a copy of ``item`` with its footprint forced into the valid grid.

    Applied when records are read from storage so that malformed data never
    reaches the layout engine. Each correction is logged.

    Args:
        item: Item as read from storage

    Returns:
        A corrected copy (the original is not modified)
    """
    fixed = item.copy()

    if fixed.width not in (1, 2):
        fixed.width = 2 if fixed.width > 2 else 1
    if fixed.column not in (0, 1):
        fixed.column = 1 if fixed.column > 1 else 0
    if fixed.width == 2 and fixed.column != 0:
        fixed.column = 0

    fixed.row = max(0.0, snap_half(fixed.row))
    fixed.height = max(MIN_HEIGHT, snap_half(fixed.height))

    if fixed != item:
        logger.warning("Normalized malformed grid item %s -> %s", item, fixed)
    return fixed


@dataclass
class SaveResult:
    """Outcome of a persistence call."""
    success: bool
    error: str | None = None
    item_count: int = 0

    def __bool__(self) -> bool:
        return self.success
