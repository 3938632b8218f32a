# lider_proxy/upstream/transport.py

"""Paced, identity-rotating HTTP transport with bounded retries."""

import logging
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin, urlparse

from curl_cffi import requests as curl_requests

from lider_proxy.upstream.errors import (
    AntiBotRedirectError,
    RetriesExhaustedError,
    TooManyRedirectsError,
)
from lider_proxy.upstream.identity_pool import IdentityPool
from lider_proxy.upstream.rate_governor import RateGovernor
from lider_proxy.upstream.response_classifier import (
    VERDICT_OK,
    VERDICT_SOFT_BLOCKED,
    ResponseClassifier,
)

logger = logging.getLogger("lider_proxy.transport")

REDIRECT_STATUSES: frozenset[int] = frozenset({301, 302, 303, 307, 308})


@dataclass
class UpstreamResponse:
    """Final response of a fetch, after redirects were followed."""

    status_code: int
    text: str
    url: str
    verdict: str
    raw: Any = None

    @property
    def ok(self) -> bool:
        return self.verdict == VERDICT_OK


class ResilientTransport:
    """Wrap a curl_cffi session with pacing, rotation and retries.

    One permit is taken from the :class:`RateGovernor` per ``fetch``
    call; retries reuse it. Each attempt rotates the user agent,
    follows redirects by hand so anti-bot hosts can be spotted, and
    retries soft-blocks and request errors with the configured delays.
    """

    def __init__(
        self,
        governor: RateGovernor,
        identities: IdentityPool,
        classifier: ResponseClassifier,
        *,
        retry_delays: list[float],
        timeout: int,
        max_redirects: int,
        base_headers: dict[str, str],
        upstream_domain: str,
        referer: str,
        impersonate: str | None = None,
        session: curl_requests.Session | None = None,
    ) -> None:
        self.governor = governor
        self.identities = identities
        self.classifier = classifier
        self.retry_delays = list(retry_delays)
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.base_headers = dict(base_headers)
        self.upstream_domain = upstream_domain.lower()
        self.referer = referer
        self.session = session or curl_requests.Session(
            impersonate=impersonate  # type: ignore[arg-type]
        )

    @property
    def max_attempts(self) -> int:
        return len(self.retry_delays) + 1

    def _is_upstream(self, url: str) -> bool:
        host = (urlparse(url).hostname or "").lower()
        return host == self.upstream_domain or host.endswith(
            "." + self.upstream_domain
        )

    def build_headers(
        self,
        url: str,
        extra_headers: dict[str, str] | None = None,
    ) -> dict[str, str]:
        """Baseline browser headers, rotated identity, referer, extras."""
        headers: dict[str, str] = {
            **self.base_headers,
            "User-Agent": self.identities.next(),
        }
        if self._is_upstream(url):
            headers["Referer"] = self.referer
        if extra_headers:
            headers.update(extra_headers)
        return headers

    def _follow(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
    ) -> tuple[curl_requests.Response, str]:
        """Send one attempt, following at most ``max_redirects`` hops."""
        current_method = method
        current_url = url
        for _ in range(self.max_redirects + 1):
            resp = self.session.request(
                current_method,  # type: ignore[arg-type]
                current_url,
                headers=headers,
                timeout=self.timeout,
                allow_redirects=False,
            )
            location = resp.headers.get("Location")
            if resp.status_code not in REDIRECT_STATUSES or not location:
                return resp, current_url

            next_url = urljoin(current_url, location)
            if self.classifier.is_anti_bot_url(next_url):
                raise AntiBotRedirectError(
                    urlparse(next_url).hostname or next_url
                )
            logger.debug(
                "Redirect %d: %s -> %s",
                resp.status_code,
                current_url,
                next_url,
            )
            if resp.status_code == 303:
                current_method = "GET"
            current_url = next_url
        raise TooManyRedirectsError(self.max_redirects)

    def fetch(
        self,
        method: str,
        url: str,
        extra_headers: dict[str, str] | None = None,
    ) -> UpstreamResponse:
        """Fetch *url*, retrying transient failures.

        Raises:
            AntiBotRedirectError: A redirect targeted an interstitial host.
            TooManyRedirectsError: The redirect chain was too long.
            RetriesExhaustedError: Every attempt failed transiently.
        """
        self.governor.acquire()

        last_error = ""
        last_blocked = False
        for attempt in range(self.max_attempts):
            if attempt > 0:
                time.sleep(self.retry_delays[attempt - 1])

            headers = self.build_headers(url, extra_headers)
            try:
                resp, final_url = self._follow(method, url, headers)
                text = resp.text
            except (AntiBotRedirectError, TooManyRedirectsError) as exc:
                logger.warning(
                    "[%s] %s %s aborted: %s",
                    "soft-block" if exc.blocked else "hard-fail",
                    method,
                    url,
                    exc.reason,
                )
                raise
            except Exception as exc:
                last_error = f"request error: {exc}"
                last_blocked = False
                logger.warning(
                    "Request error on attempt %d/%d for %s: %s",
                    attempt + 1,
                    self.max_attempts,
                    url,
                    exc,
                    exc_info=True,
                )
                continue

            verdict = self.classifier.classify(resp.status_code, text)
            if verdict == VERDICT_SOFT_BLOCKED:
                marker = self.classifier.find_marker(text)
                if marker is not None:
                    last_error = (
                        f"blocked by anti-bot protection (marker '{marker}')"
                    )
                else:
                    last_error = (
                        "rate limited or service unavailable "
                        f"(status {resp.status_code})"
                    )
                last_blocked = True
                logger.warning(
                    "[soft-block] attempt %d/%d for %s: %s",
                    attempt + 1,
                    self.max_attempts,
                    url,
                    last_error,
                )
                continue

            if verdict != VERDICT_OK:
                logger.warning(
                    "[hard-fail] HTTP %d for %s",
                    resp.status_code,
                    url,
                )
            return UpstreamResponse(
                status_code=resp.status_code,
                text=text,
                url=final_url,
                verdict=verdict,
                raw=resp,
            )

        logger.error(
            "Giving up on %s after %d attempts: %s",
            url,
            self.max_attempts,
            last_error,
        )
        raise RetriesExhaustedError(last_error, blocked=last_blocked)
