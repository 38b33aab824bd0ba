from urllib.parse import parse_qsl, urlsplit

from flatwatch.errors import InvalidUrlError
from flatwatch.models import SearchParams, freeze_params


def parse_search_url(url: str) -> SearchParams:
    """Extract every query parameter of a user search URL.

    Example: https://www.flatfox.ch/en/search/?east=7.53&north=47.02&object_category=APARTMENT
    Nothing is validated or dropped here; suppliers pick the keys they know.
    """
    if not isinstance(url, str):
        raise InvalidUrlError(url)
    try:
        parts = urlsplit(url.strip())
    except ValueError as e:
        raise InvalidUrlError(url) from e
    if not parts.scheme or not parts.netloc:
        raise InvalidUrlError(url)

    # repeated keys: last one wins
    return freeze_params(dict(parse_qsl(parts.query, keep_blank_values=True)))
