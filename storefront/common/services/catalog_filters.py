"""Filter and sort engine for catalog listings.

Everything here is pure: the same items, criteria and sort key always give
the same list, and the input list is never modified.
"""

from __future__ import annotations

import math
import re
import unicodedata
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib.parse import urlencode

from ..models.catalog_item import CatalogItem


SORT_NEWEST = "newest"
SORT_PRICE_ASC = "price-asc"
SORT_PRICE_DESC = "price-desc"
SORT_NAME = "name"
SORT_FASTEST_DELIVERY = "fastest-delivery"

SORT_KEYS = (SORT_NEWEST, SORT_PRICE_ASC, SORT_PRICE_DESC, SORT_NAME, SORT_FASTEST_DELIVERY)
DEFAULT_SORT = SORT_NEWEST

_SORT_ALIASES = {
    "price-low": SORT_PRICE_ASC,
    "price-high": SORT_PRICE_DESC,
    "delivery-fast": SORT_FASTEST_DELIVERY,
}

# Upper bound in days for each delivery filter option.
DELIVERY_BUCKETS: Dict[str, int] = {"24h": 1, "3d": 3, "1w": 7, "2w": 14}

_DURATION = re.compile(
    r"(\d+(?:\.\d+)?)\s*(?:-\s*\d+(?:\.\d+)?\s*)?(?:business\s+|working\s+|calendar\s+)?"
    r"(hours?|hrs?|h|days?|d|weeks?|wks?|w|months?)\b",
    re.IGNORECASE,
)
_UNIT_DAYS = {"d": 1, "w": 7, "m": 30}


@dataclass
class FilterCriteria:
    """Listing constraints; ``None`` (or ``False``) means unconstrained."""

    category_slug: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    delivery_time_bucket: Optional[str] = None
    service_type: Optional[str] = None
    usage_type: Optional[str] = None
    in_stock_only: bool = False
    free_text_search: Optional[str] = None


def resolve_sort_key(value: Any) -> str:
    if not isinstance(value, str):
        return DEFAULT_SORT
    key = value.strip().lower()
    key = _SORT_ALIASES.get(key, key)
    return key if key in SORT_KEYS else DEFAULT_SORT


def delivery_days(item: CatalogItem) -> Optional[int]:
    """Numeric turnaround in days, or None when it cannot be worked out."""
    if item.delivery_days is not None:
        return item.delivery_days
    match = _DURATION.search(item.delivery_time or "")
    if not match:
        return None
    amount = float(match.group(1))
    unit = match.group(2)[0].lower()
    days = amount / 24 if unit == "h" else amount * _UNIT_DAYS[unit]
    return max(int(math.ceil(days)), 0)


def _matches_delivery(item: CatalogItem, bucket: str) -> bool:
    if item.delivery_time == bucket:
        return True
    limit = DELIVERY_BUCKETS.get(bucket)
    if limit is None:
        return False
    days = delivery_days(item)
    return days is not None and days <= limit


def _searchable_text(item: CatalogItem) -> str:
    parts = [item.title, item.description, item.category_label]
    parts.extend(item.features)
    return " ".join(parts).casefold()


def matches(item: CatalogItem, criteria: FilterCriteria) -> bool:
    if criteria.category_slug:
        if item.category is None or item.category.slug != criteria.category_slug:
            return False
    if criteria.min_price is not None and item.price < criteria.min_price:
        return False
    if criteria.max_price is not None and item.price > criteria.max_price:
        return False
    if criteria.delivery_time_bucket and not _matches_delivery(item, criteria.delivery_time_bucket):
        return False
    if criteria.service_type and item.service_type != criteria.service_type:
        return False
    if criteria.usage_type and item.usage_type != criteria.usage_type:
        return False
    if criteria.in_stock_only and item.stock_quantity is not None and item.stock_quantity <= 0:
        return False
    if criteria.free_text_search:
        if criteria.free_text_search.casefold() not in _searchable_text(item):
            return False
    return True


def _timestamp(value: Optional[str]) -> float:
    if not value:
        return float("-inf")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return float("-inf")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def _collation_key(title: str):
    decomposed = unicodedata.normalize("NFKD", title)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), title)


def sort_items(items: Sequence[CatalogItem], sort_key: str = DEFAULT_SORT) -> List[CatalogItem]:
    key = resolve_sort_key(sort_key)
    # sorted() is stable, including with reverse=True.
    if key == SORT_PRICE_ASC:
        return sorted(items, key=lambda i: i.price)
    if key == SORT_PRICE_DESC:
        return sorted(items, key=lambda i: i.price, reverse=True)
    if key == SORT_NAME:
        return sorted(items, key=lambda i: _collation_key(i.title))
    if key == SORT_FASTEST_DELIVERY:
        def by_days(item: CatalogItem):
            days = delivery_days(item)
            return (days is None, days or 0)

        return sorted(items, key=by_days)
    return sorted(items, key=lambda i: _timestamp(i.created_at), reverse=True)


def filter_and_sort(
    items: Sequence[CatalogItem],
    criteria: Optional[FilterCriteria] = None,
    sort_key: str = DEFAULT_SORT,
) -> List[CatalogItem]:
    criteria = criteria or FilterCriteria()
    return sort_items([i for i in items if matches(i, criteria)], sort_key)


# --- query parameter round trip ---

def _param(params: Mapping[str, Any], key: str) -> Optional[str]:
    value = params.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _number_param(params: Mapping[str, Any], key: str) -> Optional[float]:
    value = _param(params, key)
    if value is None:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_criteria(params: Mapping[str, Any]) -> FilterCriteria:
    """Read criteria from query parameters; multi-valued or malformed ones are ignored."""
    return FilterCriteria(
        category_slug=_param(params, "category"),
        min_price=_number_param(params, "minPrice"),
        max_price=_number_param(params, "maxPrice"),
        delivery_time_bucket=_param(params, "deliveryTime"),
        service_type=_param(params, "serviceType"),
        usage_type=_param(params, "usageType"),
        in_stock_only=(_param(params, "inStock") or "").lower() == "true",
        free_text_search=_param(params, "search"),
    )


def parse_sort(params: Mapping[str, Any]) -> str:
    return resolve_sort_key(params.get("sort"))


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def criteria_to_query(criteria: FilterCriteria, sort_key: str = DEFAULT_SORT) -> Dict[str, str]:
    query: Dict[str, str] = {}
    if criteria.free_text_search:
        query["search"] = criteria.free_text_search
    if criteria.category_slug:
        query["category"] = criteria.category_slug
    if criteria.min_price is not None:
        query["minPrice"] = _format_number(criteria.min_price)
    if criteria.max_price is not None:
        query["maxPrice"] = _format_number(criteria.max_price)
    if criteria.delivery_time_bucket:
        query["deliveryTime"] = criteria.delivery_time_bucket
    if criteria.service_type:
        query["serviceType"] = criteria.service_type
    if criteria.usage_type:
        query["usageType"] = criteria.usage_type
    if criteria.in_stock_only:
        query["inStock"] = "true"
    key = resolve_sort_key(sort_key)
    if key != DEFAULT_SORT:
        query["sort"] = key
    return query


def build_listing_url(path: str, criteria: FilterCriteria, sort_key: str = DEFAULT_SORT) -> str:
    query = criteria_to_query(criteria, sort_key)
    return f"{path}?{urlencode(query)}" if query else path
