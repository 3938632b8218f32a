# lider_proxy/services/fetch_orchestrator.py

"""API-first, scraping-second fetching of every catalog operation."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from lider_proxy.config.settings import Settings
from lider_proxy.extraction.pipeline import ExtractionPipeline
from lider_proxy.models.fetch_outcome import (
    SOURCE_API,
    SOURCE_LOCAL,
    SOURCE_SCRAPING,
    FetchOutcome,
)
from lider_proxy.models.product import ProductDetail, ProductSummary
from lider_proxy.services.suggestions import generate_fallback_suggestions
from lider_proxy.upstream.errors import (
    ExtractionError,
    InvalidParameterError,
    LiderProxyError,
    TransportError,
    UpstreamFetchError,
)
from lider_proxy.upstream.transport import ResilientTransport

logger = logging.getLogger("lider_proxy.orchestrator")


@dataclass
class FetchStrategy:
    """One named way of producing data for an operation.

    ``run`` takes the operation's parameter and returns the data, or
    raises a :class:`LiderProxyError` describing why it could not.
    """

    name: str
    source: str
    run: Callable[[str], Any]

    def __call__(self, value: str) -> FetchOutcome:
        try:
            data = self.run(value)
        except LiderProxyError as exc:
            blocked = isinstance(exc, TransportError) and exc.blocked
            logger.info(
                "Strategy %s failed%s: %s",
                self.name,
                " (soft-block)" if blocked else "",
                exc,
            )
            return FetchOutcome.fail(
                str(exc), source=self.source, blocked=blocked
            )
        return FetchOutcome.ok(data, self.source)


def run_strategies(
    strategies: list[FetchStrategy],
    value: str,
) -> tuple[FetchOutcome | None, list[FetchOutcome]]:
    """Try *strategies* in order and stop at the first success.

    Returns the winning outcome (or ``None``) and every failure seen
    before it.
    """
    failures: list[FetchOutcome] = []
    for strategy in strategies:
        outcome = strategy(value)
        if outcome.success:
            return outcome, failures
        failures.append(outcome)
    return None, failures


def _encode(value: str) -> str:
    return quote(value, safe="")


class FetchOrchestrator:
    """Run search, detail, suggestion, promotion and category lookups.

    Each operation is a list of :class:`FetchStrategy` objects: the
    structured API candidates first, then the scraped HTML page, and
    for suggestions a local fallback that cannot fail.
    """

    def __init__(
        self,
        transport: ResilientTransport,
        pipeline: ExtractionPipeline | None = None,
        settings: type[Settings] = Settings,
    ) -> None:
        self.transport = transport
        self.pipeline = pipeline or ExtractionPipeline()
        self.settings = settings

    # ── Shared fetch helpers ─────────────────────────────

    def _fetch_json(self, url: str) -> Any:
        resp = self.transport.fetch(
            "GET", url, dict(self.settings.API_ACCEPT_HEADERS)
        )
        if not resp.ok:
            raise TransportError(f"API returned status {resp.status_code}")
        return self.pipeline.parse_json(resp.text)

    def _fetch_html(self, url: str) -> str:
        resp = self.transport.fetch("GET", url)
        if not resp.ok:
            raise TransportError(
                f"page returned status {resp.status_code}"
            )
        return resp.text

    def _api_products(self, template: str, **params: str) -> list[ProductSummary]:
        url = template.format(
            **{k: _encode(v) for k, v in params.items()}
        )
        return self.pipeline.parse_api_products(self._fetch_json(url))

    def _scraped_products(self, template: str, **params: str) -> list[ProductSummary]:
        url = template.format(
            **{k: _encode(v) for k, v in params.items()}
        )
        return self.pipeline.extract_summaries(self._fetch_html(url))

    # ── Search with pagination ───────────────────────────

    def _search_api(self, template: str, query: str) -> list[ProductSummary]:
        encoded = _encode(query)
        first = self._fetch_json(template.format(query=encoded, page=1))
        products = self.pipeline.parse_api_products(first)

        total_pages = min(
            self.pipeline.read_total_pages(first),
            self.settings.MAX_PAGES,
        )
        for page in range(2, total_pages + 1):
            try:
                payload = self._fetch_json(
                    template.format(query=encoded, page=page)
                )
                page_products = self.pipeline.parse_api_products(payload)
            except LiderProxyError as exc:
                logger.warning(
                    "Skipping search page %d/%d for '%s': %s",
                    page,
                    total_pages,
                    query,
                    exc,
                )
                continue
            products.extend(page_products)
        return products

    def search_strategies(self) -> list[FetchStrategy]:
        strategies = [
            FetchStrategy(
                name=f"search-api-{i}",
                source=SOURCE_API,
                run=lambda q, t=template: self._search_api(t, q),
            )
            for i, template in enumerate(self.settings.SEARCH_API_URLS, 1)
        ]
        strategies.append(
            FetchStrategy(
                name="search-page",
                source=SOURCE_SCRAPING,
                run=lambda q: self._scraped_products(
                    self.settings.SEARCH_PAGE_URL, query=q
                ),
            )
        )
        return strategies

    # ── Product detail ───────────────────────────────────

    def _detail_api(self, template: str, sku: str) -> ProductDetail:
        payload = self._fetch_json(template.format(sku=_encode(sku)))
        return self.pipeline.parse_api_detail(payload)

    def _detail_page(self, sku: str) -> ProductDetail:
        html = self._fetch_html(
            self.settings.PRODUCT_PAGE_URL.format(sku=_encode(sku))
        )
        detail = self.pipeline.extract_detail(html)
        if not detail.sku:
            detail.sku = sku
        if not detail.url:
            detail.url = self.settings.PRODUCT_PAGE_URL.format(
                sku=_encode(sku)
            )
        return detail

    def detail_strategies(self) -> list[FetchStrategy]:
        strategies = [
            FetchStrategy(
                name=f"detail-api-{i}",
                source=SOURCE_API,
                run=lambda s, t=template: self._detail_api(t, s),
            )
            for i, template in enumerate(self.settings.DETAIL_API_URLS, 1)
        ]
        strategies.append(
            FetchStrategy(
                name="detail-page",
                source=SOURCE_SCRAPING,
                run=self._detail_page,
            )
        )
        return strategies

    # ── Suggestions ──────────────────────────────────────

    def _suggestions_api(self, template: str, term: str) -> list[str]:
        payload = self._fetch_json(template.format(term=_encode(term)))
        suggestions = self.pipeline.parse_api_suggestions(payload)
        if not suggestions:
            raise ExtractionError("no suggestions returned")
        return suggestions

    def _suggestions_page(self, term: str) -> list[str]:
        products = self._scraped_products(
            self.settings.SEARCH_PAGE_URL, query=term
        )
        names: list[str] = []
        for product in products:
            name = product.display_name
            if name and name not in names:
                names.append(name)
        if not names:
            raise ExtractionError("no product names to suggest")
        return names[: self.settings.MAX_SCRAPED_SUGGESTIONS]

    def suggestion_strategies(self) -> list[FetchStrategy]:
        strategies = [
            FetchStrategy(
                name=f"suggestions-api-{i}",
                source=SOURCE_API,
                run=lambda term, t=template: self._suggestions_api(t, term),
            )
            for i, template in enumerate(
                self.settings.SUGGESTIONS_API_URLS, 1
            )
        ]
        strategies.append(
            FetchStrategy(
                name="suggestions-page",
                source=SOURCE_SCRAPING,
                run=self._suggestions_page,
            )
        )
        strategies.append(
            FetchStrategy(
                name="suggestions-local",
                source=SOURCE_LOCAL,
                run=generate_fallback_suggestions,
            )
        )
        return strategies

    # ── Promotions & categories ──────────────────────────

    def promotion_strategies(self) -> list[FetchStrategy]:
        strategies = [
            FetchStrategy(
                name=f"promotions-api-{i}",
                source=SOURCE_API,
                run=lambda p, t=template: self._api_products(
                    t, promo_type=p
                ),
            )
            for i, template in enumerate(
                self.settings.PROMOTIONS_API_URLS, 1
            )
        ]
        strategies.append(
            FetchStrategy(
                name="promotions-page",
                source=SOURCE_SCRAPING,
                run=lambda p: self._scraped_products(
                    self.settings.PROMOTIONS_PAGE_URL, promo_type=p
                ),
            )
        )
        return strategies

    def category_strategies(self) -> list[FetchStrategy]:
        strategies = [
            FetchStrategy(
                name=f"category-api-{i}",
                source=SOURCE_API,
                run=lambda c, t=template: self._api_products(
                    t, category_id=c
                ),
            )
            for i, template in enumerate(self.settings.CATEGORY_API_URLS, 1)
        ]
        strategies.append(
            FetchStrategy(
                name="category-page",
                source=SOURCE_SCRAPING,
                run=lambda c: self._scraped_products(
                    self.settings.CATEGORY_PAGE_URL, category_id=c
                ),
            )
        )
        return strategies

    # ── Driver ───────────────────────────────────────────

    @staticmethod
    def _require(value: str | None, name: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            raise InvalidParameterError(
                f"{name} parameter cannot be empty"
            )
        return cleaned

    def _execute(
        self,
        operation: str,
        value: str,
        strategies: list[FetchStrategy],
    ) -> FetchOutcome:
        outcome, failures = run_strategies(strategies, value)
        if outcome is not None:
            count = (
                len(outcome.data) if isinstance(outcome.data, list) else 1
            )
            logger.info(
                "%s '%s': %d result(s) via %s",
                operation,
                value,
                count,
                outcome.source,
            )
            return outcome

        api_reason = "; ".join(
            f.error for f in failures if f.source == SOURCE_API
        ) or "no API endpoint configured"
        scraping_reason = "; ".join(
            f.error for f in failures if f.source == SOURCE_SCRAPING
        ) or "no scraping page configured"
        blocked = any(f.blocked for f in failures)
        logger.error(
            "%s '%s' failed%s. API: %s | Scraping: %s",
            operation,
            value,
            " (upstream soft-blocking)" if blocked else "",
            api_reason,
            scraping_reason,
        )
        raise UpstreamFetchError(api_reason, scraping_reason)

    # ── Public operations ────────────────────────────────

    def search(self, query: str) -> FetchOutcome:
        """Search products; ``data`` is a list of :class:`ProductSummary`.

        Raises:
            InvalidParameterError: *query* is empty.
            UpstreamFetchError: Both the API and the search page failed.
        """
        query = self._require(query, "query")
        return self._execute("search", query, self.search_strategies())

    def product_detail(self, sku: str) -> FetchOutcome:
        """Fetch one product; ``data`` is a :class:`ProductDetail`."""
        sku = self._require(sku, "SKU")
        return self._execute("detail", sku, self.detail_strategies())

    def suggestions(self, term: str) -> FetchOutcome:
        """Suggest search terms; always succeeds for a non-empty term."""
        term = self._require(term, "term")
        return self._execute(
            "suggestions", term, self.suggestion_strategies()
        )

    def promotions(self, promo_type: str) -> FetchOutcome:
        """List products in a promotion type."""
        promo_type = self._require(promo_type, "promoType")
        return self._execute(
            "promotions", promo_type, self.promotion_strategies()
        )

    def category(self, category_id: str) -> FetchOutcome:
        """List products of a category."""
        category_id = self._require(category_id, "categoryID")
        return self._execute(
            "category", category_id, self.category_strategies()
        )
