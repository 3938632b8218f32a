# lider_proxy/models/product.py

"""Canonical product models returned by every fetch strategy."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class PriceInfo:
    """Reference (list) and sale price of a search result."""

    reference: float = 0.0
    sale: float = 0.0


@dataclass
class ProductImages:
    """Image URLs attached to a search result."""

    default: str = ""
    medium: str = ""


@dataclass
class ProductSummary:
    """A single product as listed in search, promotion or category results."""

    id: str = ""
    brand: str = ""
    description: str = ""
    display_name: str = ""
    price: PriceInfo = field(default_factory=PriceInfo)
    images: ProductImages = field(default_factory=ProductImages)

    def is_valid(self) -> bool:
        """A summary is surfaced only when it has an id or a name."""
        return bool(self.id.strip() or self.display_name.strip())

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the upstream's field names."""
        return {
            "ID": self.id,
            "brand": self.brand,
            "description": self.description,
            "displayName": self.display_name,
            "price": {
                "BasePriceReference": self.price.reference,
                "BasePriceSales": self.price.sale,
            },
            "images": {
                "defaultImage": self.images.default,
                "mediumImage": self.images.medium,
            },
        }


@dataclass
class DetailPrice:
    """Price block of a product detail page."""

    current: float = 0.0
    original: float = 0.0
    currency: str = "CLP"

    @property
    def discount(self) -> float:
        """Percentage off the original price, or 0 when undefined."""
        if self.original > 0 and self.current > 0:
            return (self.original - self.current) / self.original * 100
        return 0.0


@dataclass
class ProductDetail:
    """Full product record keyed by SKU."""

    sku: str = ""
    name: str = ""
    brand: str = ""
    description: str = ""
    price: DetailPrice = field(default_factory=DetailPrice)
    images: list[str] = field(default_factory=lambda: list[str]())
    availability: bool = True
    stock: int = 0
    rating: float = 0.0
    category: str = ""
    url: str = ""

    def is_valid(self) -> bool:
        """A detail needs at least a SKU or a name to be meaningful."""
        return bool(self.sku.strip() or self.name.strip())

    def to_dict(self) -> dict[str, Any]:
        """Serialise for the HTTP layer, including the derived discount."""
        return {
            "sku": self.sku,
            "name": self.name,
            "brand": self.brand,
            "description": self.description,
            "price": {
                "current": self.price.current,
                "original": self.price.original,
                "discount": round(self.price.discount, 2),
                "currency": self.price.currency,
            },
            "images": list(self.images),
            "availability": self.availability,
            "stock": self.stock,
            "rating": self.rating,
            "category": self.category,
            "url": self.url,
        }
