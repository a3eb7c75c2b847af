"""Single entry point for loosely-typed records coming from the content API.

Every record handed to the catalog or the cart passes through ``normalize``.
The function is total: whatever the provider returns, the result is a
``CatalogItem`` whose fields honour their type contracts, and feeding a
normalized item back in returns an equal item.
"""

from __future__ import annotations

import hashlib
import json
import math
import re
from typing import Any, Dict, List, Optional

from ..models.catalog_item import CatalogItem, CategoryRef, ImageRef


DEFAULT_DESCRIPTION = ""
DEFAULT_DELIVERY_TIME = "N/A"
DEFAULT_SERVICE_TYPE = "standard"
DEFAULT_TYPE = "products"
UNTITLED = "Untitled"

_WHITESPACE = re.compile(r"\s+")


def slugify(label: str) -> str:
    return _WHITESPACE.sub("-", label.strip().lower())


def normalize_features(value: Any) -> List[str]:
    """Lists keep their non-empty string entries; strings split on commas."""
    if isinstance(value, (list, tuple)):
        return [x.strip() for x in value if isinstance(x, str) and x.strip()]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return []


def normalize_price(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def normalize_category(value: Any) -> Optional[CategoryRef]:
    if isinstance(value, CategoryRef):
        return value
    if isinstance(value, str):
        label = value.strip()
        return CategoryRef(title=label, slug=slugify(label)) if label else None
    if isinstance(value, dict):
        title = value.get("title")
        slug = value.get("slug")
        title = title.strip() if isinstance(title, str) else ""
        slug = slug.strip() if isinstance(slug, str) else ""
        if not title and not slug:
            return None
        return CategoryRef(title=title or slug, slug=slug or slugify(title))
    return None


def normalize_image(value: Any) -> Optional[ImageRef]:
    if isinstance(value, ImageRef):
        return value if (value.url or value.imgix_url) else None
    if not isinstance(value, dict):
        return None
    url = value.get("url")
    imgix_url = value.get("imgix_url")
    url = url if isinstance(url, str) else ""
    imgix_url = imgix_url if isinstance(imgix_url, str) else ""
    if not url and not imgix_url:
        return None
    return ImageRef(url=url, imgix_url=imgix_url)


def _non_negative_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float) and math.isfinite(value):
        return max(int(value), 0)
    if isinstance(value, str):
        try:
            return max(int(float(value.strip())), 0)
        except (ValueError, OverflowError):
            return None
    return None


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _placeholder_id(record: Dict[str, Any]) -> str:
    """Stable id for a record with no id, slug or title: same record, same id."""
    try:
        fingerprint = json.dumps(record, sort_keys=True, default=str)
    except (TypeError, ValueError):
        fingerprint = ""
    return "item-" + hashlib.sha1(fingerprint.encode("utf-8")).hexdigest()[:12]


def normalize(raw: Any) -> CatalogItem:
    """Turn any provider record (or an already normalized item) into a CatalogItem.

    Fields are read from ``raw["metadata"]`` first, as the content API nests
    them, and from the top level otherwise, so both the API shape and
    ``CatalogItem.to_dict()`` are accepted.
    """
    if isinstance(raw, CatalogItem):
        return normalize(raw.to_dict())
    record: Dict[str, Any] = raw if isinstance(raw, dict) else {}
    meta = record.get("metadata")
    meta = meta if isinstance(meta, dict) else {}

    def pick(key: str) -> Any:
        if key in meta:
            return meta[key]
        return record.get(key)

    title = _text(record.get("title"), UNTITLED).strip()
    slug = _optional_text(record.get("slug")) or (slugify(title) if title != UNTITLED else "")
    raw_id = record.get("id")
    if isinstance(raw_id, int) and not isinstance(raw_id, bool):
        raw_id = str(raw_id)
    item_id = _optional_text(raw_id) or slug or _placeholder_id(record)
    if not slug:
        slug = item_id

    features = pick("features")
    if features is None:
        features = pick("tags")

    images = pick("images")
    images = images if isinstance(images, (list, tuple)) else []

    return CatalogItem(
        id=item_id,
        slug=slug,
        title=title,
        type=_text(record.get("type"), DEFAULT_TYPE),
        price=normalize_price(pick("price")),
        description=_text(pick("description"), DEFAULT_DESCRIPTION),
        category=normalize_category(pick("category")),
        features=normalize_features(features),
        delivery_time=_text(pick("delivery_time"), DEFAULT_DELIVERY_TIME),
        delivery_days=_non_negative_int(pick("delivery_days")),
        service_type=_text(pick("service_type"), DEFAULT_SERVICE_TYPE),
        usage_type=_optional_text(pick("usage_type")),
        stock_quantity=_non_negative_int(pick("stock_quantity")),
        sku=_optional_text(pick("sku")),
        created_at=_optional_text(record.get("created_at")),
        featured_image=normalize_image(pick("featured_image")),
        images=[img for img in (normalize_image(i) for i in images) if img is not None],
    )


def normalize_all(records: Any) -> List[CatalogItem]:
    if not isinstance(records, (list, tuple)):
        return []
    return [normalize(r) for r in records]
