# lider_proxy/services/health_checker.py

"""Upstream connectivity health checker."""

import asyncio
import logging
import time
from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

from lider_proxy.upstream.transport import (
    REDIRECT_STATUSES,
    ResilientTransport,
)

logger = logging.getLogger("lider_proxy.health")

_HEALTH_TIMEOUT = 10  # seconds per probe
_SLOW_THRESHOLD_MS = 5000


@dataclass
class HealthResult:
    """Result of a single upstream host probe."""

    url: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def probe_url(transport: ResilientTransport, url: str) -> HealthResult:
    """Issue one paced, non-retried GET against *url*.

    Redirects are not followed. A redirect to an anti-bot host marks the
    URL down; any other redirect counts as reachable.
    """
    transport.governor.acquire()
    headers = transport.build_headers(url)
    start = time.monotonic()
    try:
        resp = transport.session.get(
            url,
            headers=headers,
            timeout=_HEALTH_TIMEOUT,
            allow_redirects=False,
        )
        elapsed_ms = (time.monotonic() - start) * 1000
        body = resp.text

        redirect_note = ""
        location = resp.headers.get("Location")
        if resp.status_code in REDIRECT_STATUSES and location:
            target = urljoin(url, location)
            if transport.classifier.is_anti_bot_url(target):
                return HealthResult(
                    url=url,
                    status="down",
                    latency_ms=elapsed_ms,
                    message=(
                        "Anti-bot redirect to "
                        f"{urlparse(target).hostname or target}"
                    ),
                )
            redirect_note = f"Redirects to {target}"

        marker = transport.classifier.find_marker(body)
        if marker is not None:
            return HealthResult(
                url=url,
                status="down",
                latency_ms=elapsed_ms,
                message=f"Anti-bot marker '{marker}'",
            )

        if resp.status_code != 200 and not redirect_note:
            return HealthResult(
                url=url,
                status="down",
                latency_ms=elapsed_ms,
                message=f"HTTP {resp.status_code}",
            )

        if elapsed_ms > _SLOW_THRESHOLD_MS:
            return HealthResult(
                url=url,
                status="slow",
                latency_ms=elapsed_ms,
                message="High latency",
            )

        return HealthResult(
            url=url,
            status="ok",
            latency_ms=elapsed_ms,
            message=redirect_note,
        )

    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            url=url,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )


class UpstreamHealthChecker:
    """Runs concurrent probes against the upstream hosts."""

    def __init__(
        self,
        transport: ResilientTransport,
        urls: list[str],
    ) -> None:
        self.transport = transport
        self.urls = list(urls)

    async def check_all(self) -> list[HealthResult]:
        """Probe every configured URL concurrently."""
        tasks = [
            asyncio.to_thread(probe_url, self.transport, url)
            for url in self.urls
        ]
        results: list[HealthResult] = list(await asyncio.gather(*tasks))
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.url,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
