# lider_proxy/extraction/pipeline.py

"""Two-tier extraction of product records from upstream payloads."""

import json
import logging
from collections.abc import Mapping
from typing import Any

from lider_proxy.extraction.decoders import (
    decode_detail,
    decode_summaries,
)
from lider_proxy.extraction.embedded_state import (
    extract_initial_state,
    state_path,
)
from lider_proxy.extraction.html_patterns import (
    extract_detail_from_markup,
    extract_summaries_from_markup,
)
from lider_proxy.models.product import ProductDetail, ProductSummary
from lider_proxy.upstream.errors import ExtractionError

logger = logging.getLogger("lider_proxy.extraction")


class ExtractionPipeline:
    """Turn HTML pages and JSON bodies into canonical records.

    HTML goes through the embedded initial state first and falls back
    to marker scanning; only the last tier's failure is raised. JSON
    bodies are decoded directly.
    """

    SEARCH_RESULTS_PATH = "search.results"
    PRODUCT_PATH = "product"

    # ── HTML mode ────────────────────────────────────────

    def extract_summaries(self, html: str) -> list[ProductSummary]:
        """Extract search-style product lists from a page.

        Raises:
            ExtractionError: Neither tier found a valid product.
        """
        state = extract_initial_state(html)
        if state is not None:
            products = decode_summaries(
                state_path(state, self.SEARCH_RESULTS_PATH)
            )
            if products:
                logger.debug(
                    "Embedded state yielded %d products", len(products)
                )
                return products
            logger.debug("Embedded state had no usable results")

        products = extract_summaries_from_markup(html)
        if products:
            logger.debug(
                "Markup patterns yielded %d products", len(products)
            )
            return products
        raise ExtractionError("no products found in page")

    def extract_detail(self, html: str) -> ProductDetail:
        """Extract a single product detail from a product page.

        Raises:
            ExtractionError: Neither tier produced a usable detail.
        """
        state = extract_initial_state(html)
        if state is not None:
            raw = state_path(state, self.PRODUCT_PATH)
            if isinstance(raw, Mapping):
                detail = decode_detail(raw)
                if detail.is_valid():
                    return detail

        detail = extract_detail_from_markup(html)
        if detail is not None:
            return detail
        raise ExtractionError("could not extract product details from page")

    # ── JSON mode ────────────────────────────────────────

    @staticmethod
    def parse_json(body: str) -> Any:
        """Decode a JSON body.

        Raises:
            ExtractionError: The body is not valid JSON.
        """
        try:
            return json.loads(body)
        except (json.JSONDecodeError, TypeError) as exc:
            raise ExtractionError("failed to parse JSON response") from exc

    @staticmethod
    def parse_api_products(payload: Any) -> list[ProductSummary]:
        """Accept a bare array of records or a ``{"products": [...]}`` wrapper.

        An empty product list is a valid (empty) result.

        Raises:
            ExtractionError: The payload has neither shape.
        """
        if isinstance(payload, list):
            return decode_summaries(payload)
        if isinstance(payload, Mapping) and isinstance(
            payload.get("products"), list
        ):
            return decode_summaries(payload["products"])
        raise ExtractionError(
            f"unsupported product payload: {type(payload).__name__}"
        )

    @staticmethod
    def parse_api_detail(payload: Any) -> ProductDetail:
        """Decode a detail body, bare or wrapped in ``{"product": ...}``.

        Raises:
            ExtractionError: No SKU or name could be decoded.
        """
        if isinstance(payload, Mapping) and isinstance(
            payload.get("product"), Mapping
        ):
            payload = payload["product"]
        if not isinstance(payload, Mapping):
            raise ExtractionError(
                f"unsupported detail payload: {type(payload).__name__}"
            )
        detail = decode_detail(payload)
        if not detail.is_valid():
            raise ExtractionError("detail payload has no sku or name")
        return detail

    @staticmethod
    def parse_api_suggestions(payload: Any) -> list[str]:
        """Accept a bare string array or ``{"suggestions": [...]}``.

        Raises:
            ExtractionError: The payload has neither shape.
        """
        if isinstance(payload, Mapping):
            payload = payload.get("suggestions")
        if not isinstance(payload, list):
            raise ExtractionError("unsupported suggestions payload")
        return [s.strip() for s in payload if isinstance(s, str) and s.strip()]

    @staticmethod
    def read_total_pages(payload: Any) -> int:
        """Read ``nbPages`` from a search envelope (1 when absent)."""
        if not isinstance(payload, Mapping):
            return 1
        raw = payload.get("nbPages", 1)
        if isinstance(raw, bool):
            return 1
        try:
            return max(1, int(raw))
        except (TypeError, ValueError, OverflowError):
            return 1
