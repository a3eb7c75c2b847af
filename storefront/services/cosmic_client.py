"""Headless CMS (Cosmic) REST client returning raw, un-normalized objects."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from ..common.errors import CatalogFetchError


PRODUCT_PROPS = (
    "id,slug,title,type,created_at,metadata.description,metadata.price,metadata.category,"
    "metadata.featured_image,metadata.images,metadata.stock_quantity,metadata.sku,"
    "metadata.usage_type,metadata.certifications,metadata.featured"
)
SERVICE_PROPS = (
    "id,slug,title,type,created_at,metadata.description,metadata.price,metadata.delivery_time,"
    "metadata.delivery_days,metadata.category,metadata.featured_image,metadata.features,"
    "metadata.service_type,metadata.featured"
)


class CosmicCatalogProvider:
    """Reads catalog objects of one type from a Cosmic bucket."""

    def __init__(
        self,
        *,
        bucket_slug: str,
        read_key: str,
        object_type: str = "products",
        api_url: str = "https://api.cosmicjs.com/v3",
        timeout: float = 10,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.logger = logging.getLogger(__name__)
        self._bucket_slug = bucket_slug
        self._read_key = read_key
        self._object_type = object_type
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._http = http or requests.Session()

    @property
    def _props(self) -> str:
        return PRODUCT_PROPS if self._object_type == "products" else SERVICE_PROPS

    def _find(self, query: Dict[str, Any], props: Optional[str] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        url = f"{self._api_url}/buckets/{self._bucket_slug}/objects"
        params: Dict[str, Any] = {
            "read_key": self._read_key,
            "query": json.dumps(query),
            "depth": 1,
        }
        if props:
            params["props"] = props
        if limit:
            params["limit"] = limit
        try:
            response = self._http.get(url, params=params, timeout=self._timeout)
        except requests.exceptions.RequestException as exc:
            self.logger.warning("Cosmic request failed: %s", exc)
            raise CatalogFetchError(f"{type(exc).__name__}: {exc}") from exc
        # Cosmic answers 404 when a query matches nothing.
        if response.status_code == 404:
            return []
        if response.status_code != 200:
            self.logger.warning("Cosmic API error: HTTP %s", response.status_code)
            raise CatalogFetchError(f"Cosmic API error: {response.status_code}", status_code=response.status_code)
        try:
            body = response.json()
        except ValueError as exc:
            raise CatalogFetchError("Cosmic API returned invalid JSON") from exc
        objects = body.get("objects") if isinstance(body, dict) else None
        return objects if isinstance(objects, list) else []

    def fetch_catalog(self) -> List[Dict[str, Any]]:
        return self._find({"type": self._object_type}, props=self._props)

    def fetch_catalog_item(self, slug: str) -> Optional[Dict[str, Any]]:
        objects = self._find({"type": self._object_type, "slug": slug}, props=self._props, limit=1)
        return objects[0] if objects else None

    def fetch_categories(self) -> List[Dict[str, Any]]:
        return self._find({"type": "categories"}, props="id,slug,title,metadata")
