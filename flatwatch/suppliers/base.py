from abc import ABC, abstractmethod
from typing import Sequence

from flatwatch.models import Listing, ProviderMeta


class Supplier(ABC):
    @property
    @abstractmethod
    def meta(self) -> ProviderMeta:
        """Static display name, base URL and unique id."""

    @property
    def name(self) -> str:
        """Short unique supplier name, e.g. 'flatfox'."""
        return self.meta.id

    @property
    @abstractmethod
    def enabled(self) -> bool:
        ...

    @abstractmethod
    async def get_listings(self, url: str | None = None) -> Sequence[Listing]:
        """Acquire listings for a search. Never raises; [] on total failure."""

    def normalize(self, listing: Listing) -> Listing:
        return listing

    def filter(self, listing: Listing) -> bool:
        return True

    async def fetch(self) -> Sequence[Listing]:
        """Return normalized listings that pass this supplier's filter."""
        listings = await self.get_listings()
        normalized = (self.normalize(li) for li in listings)
        return [li for li in normalized if self.filter(li)]
