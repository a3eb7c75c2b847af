"""Canonical catalog record shared by the filter engine and the cart."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class CategoryRef:
    """Resolved category: a plain label and a reference both end up here."""

    title: str
    slug: str

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "slug": self.slug}


@dataclass
class ImageRef:
    url: str = ""
    imgix_url: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.url, "imgix_url": self.imgix_url}


@dataclass
class CatalogItem:
    """A product (cable catalog) or a service (RFP marketplace) after normalization."""

    id: str
    slug: str
    title: str
    type: str = "products"
    price: float = 0.0
    description: str = ""
    category: Optional[CategoryRef] = None
    features: List[str] = field(default_factory=list)
    delivery_time: str = "N/A"
    delivery_days: Optional[int] = None
    service_type: str = "standard"
    usage_type: Optional[str] = None
    stock_quantity: Optional[int] = None
    sku: Optional[str] = None
    created_at: Optional[str] = None
    featured_image: Optional[ImageRef] = None
    images: List[ImageRef] = field(default_factory=list)

    @property
    def tags(self) -> List[str]:
        return self.features

    @property
    def category_label(self) -> str:
        return self.category.title if self.category else ""

    def to_dict(self) -> Dict[str, Any]:
        """Flat form; feeding it back through the normalizer yields an equal item."""
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "type": self.type,
            "price": self.price,
            "description": self.description,
            "category": self.category.to_dict() if self.category else None,
            "features": list(self.features),
            "delivery_time": self.delivery_time,
            "delivery_days": self.delivery_days,
            "service_type": self.service_type,
            "usage_type": self.usage_type,
            "stock_quantity": self.stock_quantity,
            "sku": self.sku,
            "created_at": self.created_at,
            "featured_image": self.featured_image.to_dict() if self.featured_image else None,
            "images": [img.to_dict() for img in self.images],
        }
