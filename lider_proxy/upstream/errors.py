# lider_proxy/upstream/errors.py

"""Exception taxonomy for upstream fetching and extraction."""


class LiderProxyError(Exception):
    """Base exception for lider_proxy errors."""


class InvalidParameterError(LiderProxyError, ValueError):
    """A required operation parameter was empty."""


class TransportError(LiderProxyError):
    """An upstream request could not produce a usable response."""

    def __init__(self, reason: str, blocked: bool = False) -> None:
        super().__init__(reason)
        self.reason = reason
        self.blocked = blocked


class AntiBotRedirectError(TransportError):
    """A redirect pointed at an anti-bot interstitial host."""

    def __init__(self, host: str) -> None:
        super().__init__(
            f"blocked by anti-bot protection ({host})",
            blocked=True,
        )
        self.host = host


class TooManyRedirectsError(TransportError):
    """The redirect chain exceeded the configured limit."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"too many redirects (>{limit})")
        self.limit = limit


class RetriesExhaustedError(TransportError):
    """Every attempt in the retry schedule failed."""

    def __init__(self, last_error: str, blocked: bool = False) -> None:
        super().__init__(
            f"max retries exceeded, last error: {last_error}",
            blocked=blocked,
        )
        self.last_error = last_error


class ExtractionError(LiderProxyError):
    """No extraction tier produced a record."""


class UpstreamFetchError(LiderProxyError):
    """Both the API tier and the scraping tier failed."""

    def __init__(self, api_reason: str, scraping_reason: str) -> None:
        super().__init__(
            f"API failed: {api_reason}, Scraping failed: {scraping_reason}"
        )
        self.api_reason = api_reason
        self.scraping_reason = scraping_reason
