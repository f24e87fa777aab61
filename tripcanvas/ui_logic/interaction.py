"""
Drag and resize state machine for the trip canvas.

Turns gesture callbacks (long press, pointer movement, release, double tap,
size picker changes) into grid mutations, runs the reflow engine with
optimistic local updates and hands the final collection to the persistence
gateway without waiting for it. No UI framework dependencies.
"""
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from ..data_models import Canvas, GridItem, MomentLayout, SaveResult, snap_half
from .grid_layout import GridLayout
from .reflow import reflow

logger = logging.getLogger(__name__)

LONG_PRESS_SECONDS = 0.5
RESIZE_MIN_HEIGHT = 1.0
RESIZE_MAX_HEIGHT = 4.0


class PersistenceGateway(Protocol):
    """Durable storage for a canvas's grid positions."""

    def load_items(self, trip_id: str) -> List[GridItem]:
        ...

    def save_items(self, items: Sequence[GridItem]) -> SaveResult:
        ...


class InteractionState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"


@dataclass
class InteractionEvent:
    """Notification sent to registered callbacks."""
    kind: str  # e.g. "dropped", "resized", "save_failed"
    item_id: Optional[str]
    items: Tuple[GridItem, ...]
    error: Optional[str] = None

    def __str__(self) -> str:
        return f"InteractionEvent(kind={self.kind}, item={self.item_id}, items={len(self.items)})"


InteractionCallback = Callable[[InteractionEvent], None]


class InteractionController:
    """
    Drives drag and resize gestures on one canvas.

    Only one session runs at a time: ``IDLE -> DRAGGING -> IDLE`` or
    ``IDLE -> RESIZING -> IDLE``. Gestures that arrive in any other state
    are ignored. Every completed interaction updates the local collection
    first and then saves the whole collection in the background; a failed
    save is logged and reported to callbacks, and the last collection the
    gateway accepted stays available through ``revert_to_last_saved``.

    Gesture methods must be called from one thread, which also receives
    their events. ``saved`` and ``save_failed`` are delivered on the save
    worker thread and carry the collection that was submitted for saving.

    A dropped card is pinned during its own reflow so it lands exactly
    where the user released it. Resize previews repack without a pin.
    """

    def __init__(
        self,
        items: Sequence[GridItem],
        canvas: Canvas,
        gateway: Optional[PersistenceGateway] = None,
        *,
        executor: Optional[Executor] = None,
        long_press_seconds: float = LONG_PRESS_SECONDS,
    ) -> None:
        """
        Initialize controller for a loaded canvas.

        Args:
            items: Current item collection (copied)
            canvas: Canvas geometry
            gateway: Where completed interactions are saved, None to keep local only
            executor: Runs background saves; a single worker thread is created if omitted
            long_press_seconds: Minimum press duration that starts a drag
        """
        self.grid_layout = GridLayout(canvas)
        self.gateway = gateway
        self.long_press_seconds = long_press_seconds

        self._items: List[GridItem] = [item.copy() for item in items]
        self._last_saved: List[GridItem] = [item.copy() for item in items]
        self._state = InteractionState.IDLE
        self._active_id: Optional[str] = None

        # Drag session
        self._drag_start: Tuple[float, float] = (0.0, 0.0)
        self._drag_offset: Tuple[float, float] = (0.0, 0.0)

        # Resize session
        self._pre_resize: List[GridItem] = []
        self._preview_width = 1
        self._preview_height = 1.0

        self._executor = executor
        self._owns_executor = executor is None
        self._lock = threading.Lock()
        self._callbacks: List[InteractionCallback] = []
        self.pending_save: Optional[Future] = None

    # ------------------------------------------------------------------
    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def active_item_id(self) -> Optional[str]:
        """Id of the card being dragged or resized."""
        return self._active_id

    @property
    def items(self) -> List[GridItem]:
        """Copy of the current (optimistic) collection."""
        return [item.copy() for item in self._items]

    @property
    def last_saved_items(self) -> List[GridItem]:
        with self._lock:
            return [item.copy() for item in self._last_saved]

    @property
    def drag_offset(self) -> Tuple[float, float]:
        return self._drag_offset

    @property
    def preview_size(self) -> Tuple[int, float]:
        return (self._preview_width, self._preview_height)

    def update_canvas(self, canvas: Canvas) -> None:
        self.grid_layout.update_canvas(canvas)

    def layout(self) -> Dict[str, MomentLayout]:
        """Pixel layout of the current collection."""
        return self.grid_layout.calculate(self._items)

    def replace_items(self, items: Sequence[GridItem], persisted: bool = True) -> bool:
        """
        Replace the collection with one committed by the surrounding store.

        Refused while a gesture is in progress.

        Args:
            items: New collection
            persisted: False for local-only changes (a moment placed or
                removed before the store knows about it). The last saved
                collection then only drops items that are gone and never
                gains new ones.

        Returns:
            True if the collection was replaced
        """
        if self._state is not InteractionState.IDLE:
            logger.debug("Ignoring collection replace while %s", self._state.value)
            return False
        self._items = [item.copy() for item in items]
        with self._lock:
            if persisted:
                self._last_saved = [item.copy() for item in items]
            else:
                current_ids = {item.id for item in items}
                self._last_saved = [item for item in self._last_saved if item.id in current_ids]
        return True

    # ------------------------------------------------------------------
    def register_callback(self, callback: InteractionCallback) -> None:
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: InteractionCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify(self, kind: str, item_id: Optional[str], error: Optional[str] = None,
                items: Optional[Sequence[GridItem]] = None) -> None:
        source = self._items if items is None else items
        event = InteractionEvent(
            kind=kind,
            item_id=item_id,
            items=tuple(item.copy() for item in source),
            error=error,
        )
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception as exc:
                logger.error("Interaction callback error: %s", exc)

    # ------------------------------------------------------------------
    def long_press(self, item_id: str, duration: float) -> bool:
        """
        Start dragging an item after a sustained press.

        Args:
            item_id: Pressed item
            duration: How long the press has been held, in seconds

        Returns:
            True if a drag session started
        """
        if self._state is not InteractionState.IDLE:
            logger.debug("Long press on %s ignored while %s", item_id, self._state.value)
            return False
        if duration < self.long_press_seconds:
            return False

        layouts = self.layout()
        layout = layouts.get(item_id)
        if layout is None:
            # Unknown item or canvas without geometry yet
            logger.debug("No layout for %s, drag not started", item_id)
            return False

        self._state = InteractionState.DRAGGING
        self._active_id = item_id
        self._drag_start = (layout.x, layout.y)
        self._drag_offset = (0.0, 0.0)
        logger.debug("Drag started: %s at (%.1f, %.1f)", item_id, layout.x, layout.y)
        self._notify("drag_started", item_id)
        return True

    def long_press_at(self, x: float, y: float, duration: float) -> bool:
        """Start dragging whichever item is under the pointer."""
        item_id = self.grid_layout.find_item_at_position(x, y, self._items)
        if item_id is None:
            return False
        return self.long_press(item_id, duration)

    def drag_moved(self, dx: float, dy: float) -> None:
        """
        Update the visual offset of the dragged card.

        The grid is not touched until the card is released.

        Args:
            dx: Horizontal translation since the drag started (pixel)
            dy: Vertical translation since the drag started (pixel)
        """
        if self._state is not InteractionState.DRAGGING:
            return
        self._drag_offset = (dx, dy)
        self._notify("drag_moved", self._active_id)

    def drop(self) -> Optional[List[GridItem]]:
        """
        Release the dragged card at its current offset.

        The release point snaps onto the grid, the card is pinned there and
        everything else repacks around it. The result is saved in the
        background.

        Returns:
            The reflowed collection, None if nothing was being dragged
        """
        if self._state is not InteractionState.DRAGGING or self._active_id is None:
            logger.debug("Drop ignored while %s", self._state.value)
            return None

        item_id = self._active_id
        index = self._index_of(item_id)
        if index is None:
            # Item vanished from the collection during the drag
            logger.warning("Dragged item %s no longer on canvas", item_id)
            self._end_session()
            return None

        final_x = self._drag_start[0] + self._drag_offset[0]
        final_y = self._drag_start[1] + self._drag_offset[1]
        snapped = self.grid_layout.pixel_to_grid(final_x, final_y, self._items[index])
        self._items[index] = snapped
        self._items = reflow(self._items, pinned_id=item_id)

        logger.info("Dropped %s at column %d row %.1f", item_id, snapped.column, snapped.row)
        self._end_session()
        self._notify("dropped", item_id)
        self._persist()
        return self.items

    def abandon_drag(self) -> Optional[List[GridItem]]:
        """
        Finish a drag that ended without a valid drop.

        Treated as dropping in place: the card keeps its grid position and
        the canvas is reflowed around it.

        Returns:
            The reflowed collection, None if nothing was being dragged
        """
        if self._state is not InteractionState.DRAGGING:
            return None
        self._drag_offset = (0.0, 0.0)
        item_id = self._active_id
        self._items = reflow(self._items, pinned_id=item_id)
        self._end_session()
        self._notify("dropped", item_id)
        self._persist()
        return self.items

    # ------------------------------------------------------------------
    def double_tap(self, item_id: str) -> bool:
        """
        Open the resize preview for an item.

        Args:
            item_id: Tapped item

        Returns:
            True if a resize session started
        """
        if self._state is not InteractionState.IDLE:
            logger.debug("Double tap on %s ignored while %s", item_id, self._state.value)
            return False
        index = self._index_of(item_id)
        if index is None:
            return False

        item = self._items[index]
        self._state = InteractionState.RESIZING
        self._active_id = item_id
        self._pre_resize = [it.copy() for it in self._items]
        self._preview_width = 2 if item.is_full_width else 1
        self._preview_height = item.height
        logger.debug("Resize started: %s (%dx%.1f)", item_id, self._preview_width, self._preview_height)
        self._notify("resize_started", item_id)
        return True

    def set_preview_size(self, width: Optional[int] = None,
                         height: Optional[float] = None) -> Optional[List[GridItem]]:
        """
        Apply a size picker change to the item being resized.

        Width is limited to 1 or 2 columns, height to 1-4 rows in steps of
        0.5. The whole canvas is repacked on every change without pinning,
        so other cards may shift while the user adjusts the size.

        Args:
            width: New width in columns, None to keep the current preview
            height: New height in rows, None to keep the current preview

        Returns:
            The reflowed preview collection, None if no resize is in progress
        """
        if self._state is not InteractionState.RESIZING or self._active_id is None:
            logger.debug("Preview size ignored while %s", self._state.value)
            return None

        if width is not None:
            self._preview_width = 2 if width >= 2 else 1
        if height is not None:
            clamped = min(RESIZE_MAX_HEIGHT, max(RESIZE_MIN_HEIGHT, height))
            self._preview_height = snap_half(clamped)

        index = self._index_of(self._active_id)
        if index is None:
            logger.warning("Resized item %s no longer on canvas", self._active_id)
            return None

        item = self._items[index].copy()
        item.width = self._preview_width
        item.height = self._preview_height
        if item.width == 2:
            item.column = 0
        self._items[index] = item
        self._items = reflow(self._items)

        self._notify("resized", self._active_id)
        return self.items

    def confirm_resize(self) -> Optional[List[GridItem]]:
        """
        Keep the previewed size and save the already reflowed collection.

        Returns:
            The saved collection, None if no resize is in progress
        """
        if self._state is not InteractionState.RESIZING:
            return None
        item_id = self._active_id
        self._pre_resize = []
        self._end_session()
        logger.info("Resize confirmed for %s", item_id)
        self._notify("resize_confirmed", item_id)
        self._persist()
        return self.items

    def cancel_resize(self) -> Optional[List[GridItem]]:
        """
        Discard every preview change and restore the pre-resize collection.

        Returns:
            The restored collection, None if no resize is in progress
        """
        if self._state is not InteractionState.RESIZING:
            return None
        item_id = self._active_id
        self._items = [item.copy() for item in self._pre_resize]
        self._pre_resize = []
        self._end_session()
        logger.info("Resize cancelled for %s", item_id)
        self._notify("resize_cancelled", item_id)
        return self.items

    # ------------------------------------------------------------------
    def revert_to_last_saved(self) -> bool:
        """
        Restore the last collection the gateway accepted.

        Returns:
            True if the collection was restored
        """
        if self._state is not InteractionState.IDLE:
            return False
        self._items = self.last_saved_items
        logger.info("Reverted canvas to last saved positions")
        self._notify("reverted", None)
        return True

    def close(self) -> None:
        """Wait for background saves and release the worker thread."""
        if self._executor is not None and self._owns_executor:
            self._executor.shutdown(wait=True)
            self._executor = None

    def get_state_summary(self) -> dict[str, str | int | bool]:
        """Summary of the controller state for debugging."""
        return {
            'state': self._state.value,
            'active_item': self._active_id or "None",
            'item_count': len(self._items),
            'save_pending': bool(self.pending_save and not self.pending_save.done()),
            'callback_count': len(self._callbacks),
        }

    # ------------------------------------------------------------------
    def _index_of(self, item_id: str) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None

    def _end_session(self) -> None:
        self._state = InteractionState.IDLE
        self._active_id = None
        self._drag_offset = (0.0, 0.0)

    def _persist(self) -> Optional[Future]:
        """Save the whole collection in the background."""
        if self.gateway is None:
            return None

        snapshot = [item.copy() for item in self._items]
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="canvas-save")

        future = self._executor.submit(self._save, snapshot)
        self.pending_save = future
        return future

    def _save(self, snapshot: List[GridItem]) -> SaveResult:
        try:
            result = self.gateway.save_items(snapshot)
        except Exception as exc:
            logger.error("Failed to save grid positions: %s", exc)
            result = SaveResult(success=False, error=str(exc))

        if result.success:
            with self._lock:
                self._last_saved = snapshot
            logger.debug("Saved %d grid positions", len(snapshot))
            self._notify("saved", None, items=snapshot)
        else:
            # Local layout stays authoritative until reload or explicit revert
            logger.error("Failed to update moment positions: %s", result.error)
            self._notify("save_failed", None, error=result.error, items=snapshot)
        return result
