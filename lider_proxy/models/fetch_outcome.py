# lider_proxy/models/fetch_outcome.py

"""Tagged result of one fetch strategy."""

from dataclasses import dataclass
from typing import Any

# Provenance tags
SOURCE_API = "api"
SOURCE_SCRAPING = "scraping"
SOURCE_CACHE = "cache"
SOURCE_LOCAL = "local"
SOURCE_NONE = "none"


@dataclass
class FetchOutcome:
    """Success with a payload, or failure with a reason."""

    success: bool
    data: Any = None
    error: str = ""
    source: str = SOURCE_NONE
    blocked: bool = False

    @classmethod
    def ok(cls, data: Any, source: str) -> "FetchOutcome":
        """Build a successful outcome tagged with its provenance."""
        return cls(success=True, data=data, source=source)

    @classmethod
    def fail(
        cls,
        error: str,
        source: str = SOURCE_NONE,
        blocked: bool = False,
    ) -> "FetchOutcome":
        """Build a failed outcome carrying a human-readable reason."""
        return cls(
            success=False,
            error=error,
            source=source,
            blocked=blocked,
        )
