"""Flatfox.ch supplier.

Uses the public JSON API behind the website's map search instead of HTML
scraping: the pin endpoint lists matching ids for a geo-box, the
public-listing endpoint returns the full records.
"""

import dataclasses
import logging
from typing import Iterable, Sequence

import requests

from flatwatch.models import Listing, ProviderMeta, Rejected, SourceConfig
from flatwatch.suppliers.base import Supplier
from flatwatch.suppliers.flatfox_api import DEFAULT_BATCH_DELAY, FlatfoxApi
from flatwatch.suppliers.flatfox_mapping import filter_listings, map_record
from flatwatch.utils.blacklist import is_one_of
from flatwatch.utils.hashing import build_hash
from flatwatch.utils.search_params import parse_search_url

logger = logging.getLogger(__name__)

META = ProviderMeta(name="Flatfox", base_url="https://flatfox.ch/", id="flatfox")


class FlatfoxSupplier(Supplier):
    def __init__(
        self,
        source: SourceConfig,
        blacklist: Iterable[str] = (),
        session: requests.Session | None = None,
        batch_delay: float = DEFAULT_BATCH_DELAY,
    ):
        self._source = source
        self.blacklist = tuple(blacklist or ())
        self.api = FlatfoxApi(session=session, batch_delay=batch_delay)

    @property
    def meta(self) -> ProviderMeta:
        return META

    @property
    def enabled(self) -> bool:
        return self._source.enabled

    @property
    def url(self) -> str:
        return self._source.url

    async def get_listings(self, url: str | None = None) -> Sequence[Listing]:
        url = url if url is not None else self.url
        try:
            params = parse_search_url(url)
            logger.debug(f"Starting API call with params: {dict(params)}")

            pks = await self.api.fetch_listing_ids(params)
            if not pks:
                logger.debug("No pins returned from API")
                return []

            records = await self.api.fetch_listing_details(pks)
            if len(records) < len(pks):
                # listings can disappear between the two calls, or a batch failed
                logger.info(f"Got {len(records)} of {len(pks)} requested listings")

            mapped: list[Listing] = []
            skipped = 0
            for item in records:
                result = map_record(item)
                if isinstance(result, Rejected):
                    skipped += 1
                    continue
                logger.debug(
                    f'Mapped listing {result.id}: title="{result.title[:40]}", '
                    f'address="{result.address[:40]}", price="{result.price}", '
                    f'size="{result.size}", image={"YES" if result.image else "NO"}'
                )
                mapped.append(result)

            if skipped:
                logger.info(f"Skipped {skipped} listings due to missing required fields")

            filtered = filter_listings(mapped, params)
            logger.debug(f"Final result: {len(filtered)}/{len(records)} listings after all filtering")
            return filtered
        except Exception as e:
            logger.error(f"API error: {e}")
            return []

    def normalize(self, listing: Listing) -> Listing:
        # price is part of the identity: a price change resurfaces the listing
        return dataclasses.replace(listing, id=build_hash(listing.id, listing.price))

    def filter(self, listing: Listing) -> bool:
        if listing.title is None:
            return False
        return not is_one_of(listing.title, self.blacklist) and not is_one_of(
            listing.description, self.blacklist
        )


def init(source: SourceConfig | dict, blacklist: Iterable[str] | None = None, **kwargs) -> FlatfoxSupplier:
    """Build a supplier from {enabled, url} and the blacklist terms."""
    if isinstance(source, dict):
        source = SourceConfig(enabled=bool(source.get("enabled")), url=source.get("url") or "")
    return FlatfoxSupplier(source, blacklist or (), **kwargs)
