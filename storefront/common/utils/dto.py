from typing import Any, Dict, List, Optional

from ..models.catalog_item import CatalogItem, CategoryRef


DEFAULT_FALLBACK_IMAGE = "https://images.unsplash.com/photo-1551288049-bebda4e38f71?w=600&h=400&fit=crop&auto=format"
IMGIX_PARAMS = "w=600&h=400&fit=crop&auto=format,compress"


def image_url(item: CatalogItem, fallback: Optional[str] = None) -> str:
    fallback = fallback or DEFAULT_FALLBACK_IMAGE
    img = item.featured_image
    if img is None:
        return fallback
    url = img.imgix_url or img.url
    if not url:
        return fallback
    if "imgix.net" in url and "?" not in url:
        return f"{url}?{IMGIX_PARAMS}"
    return url


def to_catalog_dto(item: CatalogItem, fallback_image: Optional[str] = None, currency: str = "USD") -> Dict[str, Any]:
    data = item.to_dict()
    data["image_url"] = image_url(item, fallback_image)
    data["currency"] = currency
    data["in_stock"] = item.stock_quantity is None or item.stock_quantity > 0
    return data


def to_category_dto(categories: List[CategoryRef]) -> List[Dict[str, str]]:
    return [c.to_dict() for c in categories]
