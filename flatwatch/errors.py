class FlatwatchError(Exception):
    """Base class for every error raised inside flatwatch."""


class InvalidUrlError(FlatwatchError, ValueError):
    def __init__(self, url):
        super().__init__(f"Not a valid search URL: {url!r}")
        self.url = url


class UpstreamError(FlatwatchError):
    def __init__(self, status: int, endpoint: str = ""):
        super().__init__(f"{endpoint or 'upstream'} API error: {status}")
        self.status = status
        self.endpoint = endpoint


class TransportError(FlatwatchError):
    """Network-level failure (connection, timeout, TLS...)."""
