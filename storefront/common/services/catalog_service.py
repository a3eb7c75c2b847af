from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from ..errors import CatalogFetchError
from ..models.catalog_item import CatalogItem, CategoryRef
from .catalog_filters import criteria_to_query, filter_and_sort, parse_criteria, parse_sort, sort_items
from .logging import log_event
from .normalizer import normalize, normalize_all, normalize_category


class CatalogProvider(Protocol):
    def fetch_catalog(self) -> List[Dict[str, Any]]:
        ...

    def fetch_catalog_item(self, slug: str) -> Optional[Dict[str, Any]]:
        ...

    def fetch_categories(self) -> List[Dict[str, Any]]:
        ...


class CatalogService:
    """Catalog reads on top of a content provider.

    Responsibilities:
    - Normalize every record at the point it enters the application
    - Degrade provider failures to empty results
    - Filter/sort listings from query parameters
    """

    def __init__(self, provider: CatalogProvider, cache_ttl_seconds: int = 60) -> None:
        self._provider = provider
        self._cache_ttl_seconds = cache_ttl_seconds
        # naive in-process cache: key -> (ts, result)
        self._cache: Dict[str, Tuple[float, Any]] = {}

    def _cached(self, key: str) -> Optional[Any]:
        if self._cache_ttl_seconds <= 0:
            return None
        hit = self._cache.get(key)
        if hit and time.time() - hit[0] <= self._cache_ttl_seconds:
            log_event("debug", "catalog.cache_hit", key=key)
            return hit[1]
        return None

    def _store(self, key: str, value: Any) -> None:
        if self._cache_ttl_seconds > 0:
            self._cache[key] = (time.time(), value)

    def list_items(self) -> List[CatalogItem]:
        """All items, normalized, newest first. Provider failure yields []."""
        cached = self._cached("items")
        if cached is not None:
            return list(cached)
        try:
            raw = self._provider.fetch_catalog()
        except CatalogFetchError as exc:
            log_event("error", "catalog.fetch_failed", operation="list", message=str(exc), status=exc.status_code)
            return []
        items = sort_items(normalize_all(raw))
        self._store("items", items)
        return list(items)

    def get_item(self, slug: str) -> Optional[CatalogItem]:
        """Normalized item for ``slug``, or None when unknown or unreachable."""
        if not isinstance(slug, str) or not slug.strip():
            return None
        try:
            raw = self._provider.fetch_catalog_item(slug.strip())
        except CatalogFetchError as exc:
            log_event("error", "catalog.fetch_failed", operation="get", slug=slug, message=str(exc))
            return None
        if raw is None:
            return None
        return normalize(raw)

    def list_categories(self, items: Optional[List[CatalogItem]] = None) -> List[CategoryRef]:
        """Provider categories; derived from the items' categories when there are none."""
        categories = self._cached("categories")
        if categories is None:
            try:
                raw = self._provider.fetch_categories()
            except CatalogFetchError as exc:
                log_event("error", "catalog.fetch_failed", operation="categories", message=str(exc))
                categories = []
            else:
                categories = _unique_by_slug(normalize_category(r) for r in (raw or []))
                self._store("categories", categories)
        if not categories:
            source = items if items is not None else self.list_items()
            categories = _unique_by_slug(item.category for item in source)
        return list(categories)

    def search(self, params: Mapping[str, Any]) -> List[CatalogItem]:
        return filter_and_sort(self.list_items(), parse_criteria(params), parse_sort(params))

    def load_listing(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Everything a listing page needs; items and categories are fetched in parallel."""
        criteria = parse_criteria(params)
        sort_key = parse_sort(params)
        with ThreadPoolExecutor(max_workers=2) as ex:
            items_future = ex.submit(self.list_items)
            categories_future = ex.submit(self.list_categories, [])
            items = _result_or_empty(items_future, "list")
            categories = _result_or_empty(categories_future, "categories")
        if not categories:
            categories = _unique_by_slug(item.category for item in items)
        shown = filter_and_sort(items, criteria, sort_key)
        return {
            "items": shown,
            "categories": categories,
            "total": len(items),
            "shown": len(shown),
            "criteria": criteria,
            "sort": sort_key,
            "query": criteria_to_query(criteria, sort_key),
        }

    def invalidate_cache(self) -> None:
        self._cache.clear()


def _result_or_empty(future, operation: str) -> list:
    try:
        return future.result()
    except Exception as exc:
        log_event("error", "catalog.fetch_failed", operation=operation, message=f"{type(exc).__name__}: {exc}")
        return []


def _unique_by_slug(categories) -> List[CategoryRef]:
    seen = set()
    unique: List[CategoryRef] = []
    for cat in categories:
        if cat is None or cat.slug in seen:
            continue
        seen.add(cat.slug)
        unique.append(cat)
    return unique
