# lider_proxy/extraction/decoders.py

"""Schema-tolerant decoding of raw upstream records.

Every field is optional and decoded independently: a missing key or a
value of the wrong type leaves that field at its default instead of
rejecting the whole record. Alternate field names used by the different
upstream endpoints are tried in order.
"""

import math
from collections.abc import Mapping
from typing import Any

from lider_proxy.config.settings import Settings
from lider_proxy.extraction.prices import parse_locale_price
from lider_proxy.models.product import (
    DetailPrice,
    PriceInfo,
    ProductDetail,
    ProductImages,
    ProductSummary,
)


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    """Return the first present, non-None value among *keys*."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _as_str(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
        # JSON allows NaN and Infinity
        return number if math.isfinite(number) else 0.0
    if isinstance(value, str):
        return parse_locale_price(value)
    return 0.0


def _as_int(value: Any) -> int:
    return int(_as_float(value))


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _image_list(value: Any) -> list[str]:
    """Normalise an image field (array or default/medium object)."""
    if isinstance(value, list):
        return [img for img in value if isinstance(img, str) and img]
    if isinstance(value, Mapping):
        return [
            img
            for img in (
                _as_str(value.get("defaultImage")),
                _as_str(value.get("mediumImage")),
            )
            if img
        ]
    return []


def decode_summary(raw: Mapping[str, Any]) -> ProductSummary:
    """Map a raw search-result record onto :class:`ProductSummary`."""
    price = _as_mapping(raw.get("price"))

    images_raw = raw.get("images")
    if isinstance(images_raw, Mapping):
        images = ProductImages(
            default=_as_str(images_raw.get("defaultImage")),
            medium=_as_str(images_raw.get("mediumImage")),
        )
    else:
        image_list = _image_list(images_raw)
        images = ProductImages(
            default=image_list[0] if image_list else "",
            medium=image_list[1] if len(image_list) > 1 else "",
        )

    return ProductSummary(
        id=_as_str(_first(raw, "id", "ID", "sku")),
        brand=_as_str(raw.get("brand")),
        description=_as_str(raw.get("description")),
        display_name=_as_str(_first(raw, "displayName", "name")),
        price=PriceInfo(
            reference=_as_float(
                _first(price, "BasePriceReference", "original")
            ),
            sale=_as_float(_first(price, "BasePriceSales", "current")),
        ),
        images=images,
    )


def decode_summaries(items: Any) -> list[ProductSummary]:
    """Decode a list of raw records, dropping non-objects and invalid ones."""
    if not isinstance(items, list):
        return []
    summaries = [
        decode_summary(item) for item in items if isinstance(item, Mapping)
    ]
    return [s for s in summaries if s.is_valid()]


def decode_detail(raw: Mapping[str, Any]) -> ProductDetail:
    """Map a raw product record onto :class:`ProductDetail`."""
    price = _as_mapping(raw.get("price"))
    sku = _as_str(_first(raw, "sku", "SKU"))

    availability = _first(raw, "availability", "available")
    url = _as_str(raw.get("url"))
    if not url and sku:
        url = Settings.PRODUCT_PAGE_URL.format(sku=sku)

    return ProductDetail(
        sku=sku,
        name=_as_str(_first(raw, "name", "displayName")),
        brand=_as_str(raw.get("brand")),
        description=_as_str(raw.get("description")),
        price=DetailPrice(
            current=_as_float(_first(price, "current", "BasePriceSales")),
            original=_as_float(
                _first(price, "original", "BasePriceReference")
            ),
            currency=(
                _as_str(price.get("currency")) or Settings.DEFAULT_CURRENCY
            ),
        ),
        images=_image_list(raw.get("images")),
        availability=(
            availability if isinstance(availability, bool) else True
        ),
        stock=_as_int(raw.get("stock")),
        rating=_as_float(raw.get("rating")),
        category=_as_str(raw.get("category")),
        url=url,
    )
