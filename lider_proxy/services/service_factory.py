# lider_proxy/services/service_factory.py

"""Composition root: wire one shared upstream stack for the process."""

import logging

from lider_proxy.config.settings import Settings
from lider_proxy.extraction.pipeline import ExtractionPipeline
from lider_proxy.services.fetch_orchestrator import FetchOrchestrator
from lider_proxy.upstream.identity_pool import IdentityPool
from lider_proxy.upstream.rate_governor import RateGovernor
from lider_proxy.upstream.response_classifier import ResponseClassifier
from lider_proxy.upstream.transport import ResilientTransport

logger = logging.getLogger("lider_proxy.factory")


def build_transport(settings: type[Settings] = Settings) -> ResilientTransport:
    """Create the transport with its governor, identities and classifier."""
    return ResilientTransport(
        governor=RateGovernor(settings.PACING_INTERVAL),
        identities=IdentityPool(settings.USER_AGENTS),
        classifier=ResponseClassifier(
            anti_bot_markers=settings.ANTI_BOT_MARKERS,
            anti_bot_hosts=settings.ANTI_BOT_HOSTS,
        ),
        retry_delays=settings.RETRY_DELAYS,
        timeout=settings.REQUEST_TIMEOUT,
        max_redirects=settings.MAX_REDIRECTS,
        base_headers=settings.DEFAULT_HEADERS,
        upstream_domain=settings.UPSTREAM_DOMAIN,
        referer=settings.REFERER_URL,
        impersonate=settings.IMPERSONATE_BROWSER,
    )


def build_orchestrator(
    settings: type[Settings] = Settings,
    transport: ResilientTransport | None = None,
) -> FetchOrchestrator:
    """Create the process-wide orchestrator.

    Call once at startup and share the result; every caller then paces
    through the same :class:`RateGovernor`.
    """
    orchestrator = FetchOrchestrator(
        transport=transport or build_transport(settings),
        pipeline=ExtractionPipeline(),
        settings=settings,
    )
    logger.info(
        "Upstream stack ready: pacing=%.1fs, attempts=%d, identities=%d",
        settings.PACING_INTERVAL,
        len(settings.RETRY_DELAYS) + 1,
        len(settings.USER_AGENTS),
    )
    return orchestrator
