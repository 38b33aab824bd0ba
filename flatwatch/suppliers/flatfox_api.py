import asyncio
import logging
from typing import Any, Iterator, Sequence

import requests

from flatwatch.errors import TransportError, UpstreamError
from flatwatch.models import SearchParams

logger = logging.getLogger(__name__)

API_BASE = "https://flatfox.ch/api/v1"
PIN_URL = f"{API_BASE}/pin/"
LISTING_URL = f"{API_BASE}/public-listing/"

# Keys of the user's search URL that the pin endpoint understands
PIN_KEYS = (
    "east", "west", "north", "south",
    "object_category", "offer_type",
    "min_rooms", "max_rooms",
    "min_price", "max_price",
    "attribute", "moving_date_from", "is_swap", "ordering",
)

# Same hard limit the website itself uses on the map
MAX_PIN_COUNT = 400
BATCH_SIZE = 20
DEFAULT_BATCH_DELAY = 0.5
TIMEOUT = 30

HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "Referer": "https://flatfox.ch/en/search/",
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/19.0 Safari/605.1.15",
}


def build_pin_query(params: SearchParams) -> dict[str, str]:
    query = {key: params[key] for key in PIN_KEYS if params.get(key)}
    query["max_count"] = str(MAX_PIN_COUNT)
    return query


def build_detail_query(pks: Sequence[Any]) -> list[tuple[str, str]]:
    query = [("expand", "cover_image"), ("limit", "0")]
    query.extend(("pk", str(pk)) for pk in pks)
    return query


def chunked(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _unwrap_results(data: Any) -> list[dict]:
    # public-listing answers with a bare array; older responses were paginated
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return data.get("results") or []
    return []


class FlatfoxApi:
    """Thin client for the two JSON endpoints behind flatfox.ch's map search."""

    def __init__(
        self,
        session: requests.Session | None = None,
        batch_size: int = BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        # Reuse a session for keep-alive + connection pooling
        self._session = session or requests.Session()
        self.batch_size = batch_size
        self.batch_delay = batch_delay

    async def _get_json(self, url: str, params: Any, endpoint: str) -> Any:
        # requests is blocking; keep the bot's event loop free while it waits
        try:
            resp = await asyncio.to_thread(
                self._session.get, url, params=params, headers=HEADERS, timeout=TIMEOUT
            )
        except requests.RequestException as e:
            raise TransportError(f"{endpoint} request failed: {e}") from e
        if not resp.ok:
            raise UpstreamError(resp.status_code, endpoint)
        return resp.json()

    async def fetch_listing_ids(self, params: SearchParams) -> list[Any]:
        """Ask the pin (map marker) endpoint which listings match the search."""
        pins = await self._get_json(PIN_URL, build_pin_query(params), "pin")
        if not isinstance(pins, list):
            logger.warning(f"Unexpected pin response type: {type(pins).__name__}")
            return []
        logger.debug(f"fetch_listing_ids: returned {len(pins)} pins")
        return [pin["pk"] for pin in pins if isinstance(pin, dict) and pin.get("pk") is not None]

    async def fetch_listing_details(self, pks: Sequence[Any]) -> list[dict]:
        """Fetch full records in batches; a failed batch is skipped, not fatal."""
        if not pks:
            return []

        batches = list(chunked(list(pks), self.batch_size))
        records: list[dict] = []
        for n, batch in enumerate(batches, start=1):
            if n > 1 and self.batch_delay > 0:
                # Small delay between requests, upstream rate-limits bursts
                await asyncio.sleep(self.batch_delay)
            try:
                data = await self._get_json(
                    LISTING_URL, build_detail_query(batch), "public-listing"
                )
            except (UpstreamError, TransportError, ValueError) as e:
                logger.warning(f"Skipping batch {n}/{len(batches)} ({len(batch)} ids): {e}")
                continue

            found = _unwrap_results(data)
            logger.debug(f"Batch {n}/{len(batches)}: {len(found)}/{len(batch)} listings")
            records.extend(found)

        return records
