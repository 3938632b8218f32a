# lider_proxy/upstream/response_classifier.py

"""Classify upstream responses as ok, soft-blocked, or hard-failed."""

from urllib.parse import urlparse

VERDICT_OK = "ok"
VERDICT_SOFT_BLOCKED = "soft-blocked"
VERDICT_HARD_FAILED = "hard-failed"

SOFT_BLOCK_STATUSES: frozenset[int] = frozenset({429, 503})


class ResponseClassifier:
    """Decide what a status code and body mean for the fetch loop.

    Soft-blocks (rate limiting, anti-bot interstitials) are worth
    retrying; hard failures are returned to the caller as-is.
    """

    def __init__(
        self,
        anti_bot_markers: list[str],
        anti_bot_hosts: list[str],
    ) -> None:
        self.anti_bot_markers = list(anti_bot_markers)
        self.anti_bot_hosts = [h.lower() for h in anti_bot_hosts]

    def find_marker(self, body: str) -> str | None:
        """Return the first anti-bot marker present in *body*."""
        for marker in self.anti_bot_markers:
            if marker in body:
                return marker
        return None

    def classify(self, status_code: int, body: str) -> str:
        """Return one of the ``VERDICT_*`` constants."""
        if status_code in SOFT_BLOCK_STATUSES:
            return VERDICT_SOFT_BLOCKED
        if self.find_marker(body) is not None:
            return VERDICT_SOFT_BLOCKED
        if 200 <= status_code < 300:
            return VERDICT_OK
        return VERDICT_HARD_FAILED

    def is_anti_bot_url(self, url: str) -> bool:
        """True when *url* points at a known interstitial host."""
        host = (urlparse(url).hostname or "").lower()
        return any(
            host == blocked or host.endswith("." + blocked)
            for blocked in self.anti_bot_hosts
        )
