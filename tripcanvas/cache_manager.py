"""
Local JSON persistence for trip canvases.

Keeps every trip's grid positions in a single JSON document so a canvas
can be opened, rearranged and saved without a network connection.
"""
import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .data_models import GridItem, SaveResult, normalize_item

logger = logging.getLogger(__name__)

STORE_VERSION = 1


class CacheError(Exception):
    """Raised when the store file cannot be read or written."""


class LocalCanvasStore:
    """
    Persistence gateway over a JSON file.

    ``save_items`` patches items by id wherever they live, like the remote
    batch update; an id that is not stored fails the whole save and leaves
    the file untouched.
    """

    def __init__(self, path: Path) -> None:
        """
        Initialize store.

        Args:
            path: JSON file to use, created on first write
        """
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"version": STORE_VERSION, "trips": {}}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise CacheError(f"Failed to read canvas store {self.path}: {exc}") from exc
        if not isinstance(data, dict) or not isinstance(data.get("trips"), dict):
            raise CacheError(f"Canvas store {self.path} has an unexpected format")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            tmp_path.replace(self.path)
        except OSError as exc:
            raise CacheError(f"Failed to write canvas store {self.path}: {exc}") from exc

    def load_items(self, trip_id: str) -> List[GridItem]:
        """
        Load a trip's items, normalising malformed records.

        Args:
            trip_id: Trip to load

        Returns:
            Stored items, empty for an unknown trip

        Raises:
            CacheError: If the file is unreadable
        """
        with self._lock:
            data = self._read()

        items: List[GridItem] = []
        for record in data["trips"].get(trip_id, []):
            try:
                items.append(normalize_item(GridItem.from_record(record)))
            except (ValueError, TypeError, AttributeError, OverflowError) as exc:
                logger.warning("Skipping unreadable record in %s: %s", trip_id, exc)

        logger.debug("Loaded %d items for trip %s from %s", len(items), trip_id, self.path)
        return items

    def add_items(self, trip_id: str, items: Sequence[GridItem]) -> None:
        """
        Store new items under a trip, replacing records with the same id.

        Args:
            trip_id: Owning trip
            items: Items to store
        """
        with self._lock:
            data = self._read()
            records = data["trips"].setdefault(trip_id, [])
            new_ids = {item.id for item in items}
            records[:] = [r for r in records if not isinstance(r, dict) or r.get("id") not in new_ids]
            records.extend({"id": item.id, **item.grid_position()} for item in items)
            self._write(data)
        logger.debug("Added %d items to trip %s", len(items), trip_id)

    def remove_item(self, item_id: str) -> bool:
        """
        Delete an item from whichever trip holds it.

        Returns:
            True if the item existed
        """
        with self._lock:
            data = self._read()
            for records in data["trips"].values():
                for index, record in enumerate(records):
                    if isinstance(record, dict) and record.get("id") == item_id:
                        del records[index]
                        self._write(data)
                        return True
        return False

    def save_items(self, items: Sequence[GridItem]) -> SaveResult:
        """
        Update stored positions for every given item.

        Args:
            items: Full canvas collection

        Returns:
            SaveResult; an unknown id or an I/O error is a failure
        """
        try:
            with self._lock:
                data = self._read()
                index: Dict[str, Dict[str, Any]] = {}
                for records in data["trips"].values():
                    for record in records:
                        if isinstance(record, dict):
                            index[record.get("id")] = record

                for item in items:
                    record = index.get(item.id)
                    if record is None:
                        return SaveResult(success=False, error=f"Moment not found: {item.id}")
                    record.update(item.grid_position())

                self._write(data)
        except CacheError as exc:
            logger.error("Local save failed: %s", exc)
            return SaveResult(success=False, error=str(exc))

        return SaveResult(success=True, item_count=len(items))

    def clear(self) -> None:
        """Remove the store file."""
        with self._lock:
            if self.path.exists():
                self.path.unlink()
        logger.info("Canvas store cleared: %s", self.path)
