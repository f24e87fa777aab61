import logging
from concurrent.futures import Executor
from typing import Callable, Dict, List, Optional

from config.base import BaseConfiguration

from .data_models import GridItem, MomentImportance, MomentLayout
from .ui_logic.allocator import next_grid_position, next_position_for_importance
from .ui_logic.interaction import (
    InteractionCallback,
    InteractionController,
    PersistenceGateway,
)
from .ui_logic.reflow import find_overlaps

logger = logging.getLogger(__name__)


class CanvasCoordinator:
    """Opens one trip's canvas and owns its interaction controller."""

    def __init__(
        self,
        trip_id: str,
        gateway: PersistenceGateway,
        config: Optional[BaseConfiguration] = None,
        *,
        executor: Optional[Executor] = None,
    ) -> None:
        self.trip_id = trip_id
        self.gateway = gateway
        self.config = config or BaseConfiguration()
        self._executor = executor
        self.controller: Optional[InteractionController] = None
        self._callbacks: List[InteractionCallback] = []

    def open(self, pixel_width: float = 0) -> List[GridItem]:
        """Load the trip's items once and set up the controller."""
        items = self.gateway.load_items(self.trip_id)

        overlaps = find_overlaps(items)
        if overlaps:
            # Stored layouts are rendered as-is; the next interaction repacks them
            logger.warning("Trip %s has %d overlapping moment pairs", self.trip_id, len(overlaps))

        self.controller = InteractionController(
            items,
            self.config.canvas(pixel_width),
            self.gateway,
            executor=self._executor,
            long_press_seconds=self.config.long_press_seconds,
        )
        for callback in self._callbacks:
            self.controller.register_callback(callback)

        logger.info("Opened canvas for trip %s with %d moments", self.trip_id, len(items))
        return self.controller.items

    def close(self) -> None:
        if self.controller:
            self.controller.close()
            self.controller = None

    # ------------------------------------------------------------------
    def add_listener(self, callback: InteractionCallback) -> None:
        if callback not in self._callbacks:
            self._callbacks.append(callback)
            if self.controller:
                self.controller.register_callback(callback)

    def remove_listener(self, callback: InteractionCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)
            if self.controller:
                self.controller.unregister_callback(callback)

    # ------------------------------------------------------------------
    def _require_controller(self) -> InteractionController:
        if self.controller is None:
            raise RuntimeError(f"Canvas for trip {self.trip_id} is not open")
        return self.controller

    @property
    def items(self) -> List[GridItem]:
        if self.controller is None:
            return []
        return self.controller.items

    def resize_view(self, pixel_width: float) -> None:
        """Apply the width reported by the view's layout pass."""
        if pixel_width <= 0:
            return
        self._require_controller().update_canvas(self.config.canvas(pixel_width))

    def layout(self) -> Dict[str, MomentLayout]:
        if self.controller is None:
            return {}
        return self.controller.layout()

    def content_height(self) -> float:
        controller = self._require_controller()
        return controller.grid_layout.content_height(controller.items)

    def place_new_moment(
        self,
        moment_id: str,
        importance: Optional[MomentImportance] = None,
        *,
        width: Optional[int] = None,
        height: Optional[float] = None,
    ) -> GridItem:
        """
        Position a moment that has just been created.

        The size comes from ``importance`` unless ``width``/``height`` are
        given. The item is appended to the local collection; storing the new
        record is left to the caller that creates the moment.

        Returns:
            The placed item
        """
        controller = self._require_controller()
        existing = controller.items

        if width is None and height is None and importance is not None:
            item = next_position_for_importance(existing, moment_id, importance)
        else:
            item = next_grid_position(existing, moment_id, width or 1, height or 1.0)

        if not controller.replace_items(existing + [item], persisted=False):
            raise RuntimeError("Cannot add a moment while a gesture is in progress")

        logger.info("Placed moment %s at column %d row %.1f", moment_id, item.column, item.row)
        return item

    def remove_moment(self, moment_id: str) -> bool:
        """
        Drop a deleted moment from the local collection.

        Remaining items are not moved until the next interaction reflows them.

        Returns:
            True if the moment was on the canvas
        """
        controller = self._require_controller()
        existing = controller.items
        remaining = [item for item in existing if item.id != moment_id]
        if len(remaining) == len(existing):
            return False
        return controller.replace_items(remaining, persisted=False)

    def on_save_failed(self, handler: Callable[[Optional[str]], None]) -> None:
        """Call ``handler`` with the error text whenever a background save fails."""
        def _forward(event) -> None:
            if event.kind == "save_failed":
                handler(event.error)
        self.add_listener(_forward)
