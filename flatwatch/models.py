from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

# Query parameters of a user search URL, verbatim and read-only
SearchParams = Mapping[str, str]


def freeze_params(params: dict[str, str]) -> SearchParams:
    return MappingProxyType(dict(params))


@dataclass(frozen=True)
class Listing:
    id: str                   # raw pk until normalize() swaps in the content hash
    price: str                # "1’500 CHF" or ""
    size: str                 # "3.5 rooms, 72 m²"
    title: str
    link: str
    description: str
    address: str
    image: str
    rooms: float = 0.0        # numeric source fields, only used for filtering
    price_amount: float = 0.0


@dataclass(frozen=True)
class Rejected:
    """A raw record the mapper refused, with the reason why."""
    pk: str
    reason: str


@dataclass(frozen=True)
class SourceConfig:
    enabled: bool
    url: str


@dataclass(frozen=True)
class ProviderMeta:
    name: str                 # e.g. "Flatfox"
    base_url: str
    id: str                   # unique supplier id, e.g. "flatfox"
