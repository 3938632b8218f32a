# lider_proxy/extraction/html_patterns.py

"""Marker-based HTML extraction used when no embedded state is usable."""

import re

from bs4 import BeautifulSoup, Tag

from lider_proxy.config.settings import Settings
from lider_proxy.extraction.prices import parse_locale_price
from lider_proxy.models.product import (
    DetailPrice,
    PriceInfo,
    ProductDetail,
    ProductImages,
    ProductSummary,
)

_CARD_SELECTOR = '[data-testid="product-item"]'
_TITLE_SELECTOR = '[data-testid="product-title"]'
_PRICE_SELECTOR = '[data-testid="product-price"]'

_DOLLAR_AMOUNT_RE = re.compile(r"\$\s*([0-9][0-9.,]*)")
_SKU_RE = re.compile(r'"sku"\s*:\s*"([^"]+)"')
_PRICE_RE = re.compile(r'"price"\s*:\s*"?\$?\s*([0-9][0-9.,]*)')


def _attr(tag: Tag | None, name: str) -> str:
    if tag is None:
        return ""
    value = tag.get(name, "")
    if isinstance(value, list):
        value = " ".join(value)
    return str(value).strip() if value else ""


def _card_product_id(card: Tag) -> str:
    own = _attr(card, "data-product-id")
    if own:
        return own
    return _attr(card.select_one("[data-product-id]"), "data-product-id")


def _parse_card(card: Tag) -> ProductSummary:
    """Build a partial summary from whatever markers the card carries."""
    title_el = card.select_one(_TITLE_SELECTOR)
    price_el = card.select_one(_PRICE_SELECTOR)

    price = 0.0
    if price_el is not None:
        amount = _DOLLAR_AMOUNT_RE.search(price_el.get_text(" "))
        if amount:
            price = parse_locale_price(amount.group(1))

    return ProductSummary(
        id=_card_product_id(card),
        display_name=(
            title_el.get_text(strip=True) if title_el is not None else ""
        ),
        price=PriceInfo(reference=price, sale=price),
        images=ProductImages(default=_attr(card.select_one("img"), "src")),
    )


def extract_summaries_from_markup(html: str) -> list[ProductSummary]:
    """Scan product cards; keep only those with both an id and a name."""
    soup = BeautifulSoup(html, "lxml")
    products: list[ProductSummary] = []
    for card in soup.select(_CARD_SELECTOR):
        product = _parse_card(card)
        if product.id and product.display_name:
            products.append(product)
    return products


def extract_detail_from_markup(html: str) -> ProductDetail | None:
    """Assemble a detail from SKU/price fragments and the page heading.

    Returns ``None`` unless an identifier (SKU or name) and a positive
    price were both found.
    """
    soup = BeautifulSoup(html, "lxml")

    sku_match = _SKU_RE.search(html)
    sku = sku_match.group(1).strip() if sku_match else ""

    heading = soup.find("h1")
    name = heading.get_text(strip=True) if heading is not None else ""

    price_match = _PRICE_RE.search(html)
    price = parse_locale_price(price_match.group(1)) if price_match else 0.0

    if not (sku or name) or price <= 0:
        return None

    return ProductDetail(
        sku=sku,
        name=name,
        price=DetailPrice(
            current=price,
            original=price,
            currency=Settings.DEFAULT_CURRENCY,
        ),
        availability=True,
        url=Settings.PRODUCT_PAGE_URL.format(sku=sku) if sku else "",
    )
