"""Raw public-listing record -> Listing, plus the client-side bound filter.

The pin endpoint does not reliably honour price/room bounds, so every mapped
listing is re-checked against the user's search before it is returned.
"""

import logging
import math
from typing import Any, Iterable

from flatwatch.models import Listing, Rejected, SearchParams

logger = logging.getLogger(__name__)

SITE_URL = "https://www.flatfox.ch"
IMAGE_HOST = "https://flatfox.ch"
CURRENCY = "CHF"
THOUSANDS_SEP = "’"      # de-CH groups digits with a right single quote
DESCRIPTION_LIMIT = 200


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        num = float(str(value).strip())
    except ValueError:
        return None
    return num if math.isfinite(num) else None


def _fmt_number(value: float) -> str:
    return str(int(value)) if value.is_integer() else f"{value:g}"


def format_price(amount: float) -> str:
    if amount.is_integer():
        text = f"{int(amount):,}"
    else:
        text = f"{amount:,.3f}".rstrip("0").rstrip(".")
    return f"{text.replace(',', THOUSANDS_SEP)} {CURRENCY}"


def format_size(rooms: Any, surface: Any) -> str:
    parts = []
    if rooms:
        num = _to_number(rooms)
        parts.append(f"{_fmt_number(num) if num is not None else rooms} rooms")
    if surface:
        num = _to_number(surface)
        parts.append(f"{_fmt_number(num) if num is not None else surface} m²")
    return ", ".join(parts)


def _image_url(item: dict) -> str:
    cover = item.get("cover_image")
    if not isinstance(cover, dict) or not cover.get("url_listing_search"):
        return ""
    path = cover["url_listing_search"]
    if not isinstance(path, str):
        raise TypeError(f"cover image path is {type(path).__name__}, not str")
    return IMAGE_HOST + path


def map_record(item: Any) -> Listing | Rejected:
    if not isinstance(item, dict):
        logger.warning(f"Skipping listing: expected an object, got {type(item).__name__}")
        return Rejected(pk="", reason="not an object")

    raw_pk = item.get("pk")
    pk = "" if raw_pk is None else str(raw_pk)

    if not item.get("url"):
        logger.warning(f"Skipping listing {pk}: missing URL field")
        return Rejected(pk=pk, reason="missing URL field")
    if not isinstance(item["url"], str):
        logger.warning(f"Skipping listing {pk}: URL field is not a string")
        return Rejected(pk=pk, reason="malformed URL field")
    if not item.get("short_title") and not item.get("pitch_title"):
        logger.warning(f"Skipping listing {pk}: missing title field")
        return Rejected(pk=pk, reason="missing title field")

    try:
        price_amount = _to_number(item.get("price_display"))
        price = format_price(price_amount) if price_amount else ""

        description = item.get("description_title") or ""
        if not description and item.get("description"):
            description = str(item["description"])[:DESCRIPTION_LIMIT]

        return Listing(
            id=pk,
            price=price,
            size=format_size(item.get("number_of_rooms"), item.get("surface_living")),
            title=str(item.get("short_title") or item.get("pitch_title")),
            link=SITE_URL + item["url"],
            description=str(description),
            address=str(item.get("public_address") or ""),
            image=_image_url(item),
            rooms=_to_number(item.get("number_of_rooms")) or 0.0,
            price_amount=price_amount or 0.0,
        )
    except (TypeError, ValueError) as e:
        logger.warning(f"Skipping listing {pk}: malformed field ({e})")
        return Rejected(pk=pk, reason="malformed field")


def _bound(params: SearchParams, key: str, default: float) -> float:
    raw = params.get(key)
    if raw is None or not str(raw).strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring unparseable bound {key}={raw!r}")
        return default
    if math.isnan(value):
        # NaN compares false against everything, treat it as no bound
        logger.warning(f"Ignoring non-numeric bound {key}={raw!r}")
        return default
    return value


def filter_listings(listings: Iterable[Listing], params: SearchParams) -> list[Listing]:
    listings = list(listings)
    min_rooms = _bound(params, "min_rooms", 0.0)
    max_rooms = _bound(params, "max_rooms", math.inf)
    min_price = _bound(params, "min_price", 0.0)
    max_price = _bound(params, "max_price", math.inf)

    kept: list[Listing] = []
    for li in listings:
        if not min_rooms <= li.rooms <= max_rooms:
            logger.debug(f"Filtering by rooms: {li.id} has {li.rooms} rooms (min: {min_rooms}, max: {max_rooms})")
            continue
        if not min_price <= li.price_amount <= max_price:
            logger.debug(f"Filtering by price: {li.id} has {CURRENCY} {li.price_amount} (min: {min_price}, max: {max_price})")
            continue
        kept.append(li)

    logger.debug(f"filter_listings: {len(listings)} -> {len(kept)} after price/rooms filter")
    return kept
