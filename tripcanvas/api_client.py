"""
Persistence gateway backed by the trip document store's HTTP API.

Loads the moments of a trip once when a canvas opens and writes the whole
reflowed position set back after every completed interaction.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from .data_models import GridItem, SaveResult, normalize_item

logger = logging.getLogger(__name__)

GET_MOMENTS_PATH = "trips/moments:getMoments"
BATCH_UPDATE_PATH = "trips/moments:batchUpdateMomentGridPositions"


class GatewayError(Exception):
    """Raised when the document store cannot be read."""


class ConvexGateway:
    """Reads and writes moment grid positions through the deployment's HTTP API."""

    def __init__(self, base_url: str, auth_token: Optional[str] = None,
                 *, timeout: float = 15.0, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def _call(self, kind: str, path: str, args: Dict[str, Any]) -> Any:
        """
        Run a query or mutation and return its value.

        Raises:
            GatewayError: On transport errors or an error status from the server
        """
        url = f"{self.base_url}/api/{kind}"
        payload = {"path": path, "args": args, "format": "json"}

        try:
            response = self.session.post(url, json=payload, headers=self._get_headers(),
                                         timeout=self.timeout)
        except requests.RequestException as exc:
            raise GatewayError(f"{kind} {path} failed: {exc}") from exc

        if response.status_code != 200:
            raise GatewayError(f"{kind} {path} failed: {response.status_code} - {response.text}")

        try:
            body = response.json()
        except ValueError as exc:
            raise GatewayError(f"{kind} {path} returned invalid JSON") from exc

        if body.get("status") != "success":
            raise GatewayError(body.get("errorMessage") or f"{kind} {path} failed")
        return body.get("value")

    def load_items(self, trip_id: str) -> List[GridItem]:
        """
        Load the grid positions of every moment in a trip.

        Malformed records are normalised, records without an id are skipped.

        Args:
            trip_id: Trip whose canvas is being opened

        Returns:
            Items in the order the store returned them

        Raises:
            GatewayError: If the store cannot be read
        """
        records = self._call("query", GET_MOMENTS_PATH, {"tripId": trip_id}) or []

        items: List[GridItem] = []
        for record in records:
            try:
                item = normalize_item(GridItem.from_record(record))
            except (ValueError, TypeError, AttributeError, OverflowError) as exc:
                logger.warning("Skipping unreadable moment record: %s", exc)
                continue
            items.append(item)

        logger.info("Loaded %d moments for trip %s", len(items), trip_id)
        return items

    def save_items(self, items: Sequence[GridItem]) -> SaveResult:
        """
        Write the full position set of a canvas in one batch.

        Args:
            items: Every item on the canvas (not a diff)

        Returns:
            SaveResult; failures are reported, never raised
        """
        updates = [
            {"momentId": item.id, "gridPosition": item.grid_position()}
            for item in items
        ]
        try:
            self._call("mutation", BATCH_UPDATE_PATH, {"updates": updates})
        except GatewayError as exc:
            logger.error("Batch position update failed: %s", exc)
            return SaveResult(success=False, error=str(exc))

        logger.info("Saved %d moment positions", len(updates))
        return SaveResult(success=True, item_count=len(updates))

    def close(self) -> None:
        self.session.close()
