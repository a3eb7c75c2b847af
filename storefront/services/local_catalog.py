"""File-backed catalog provider used for development seed data and tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..common.errors import CatalogFetchError


class LocalCatalogProvider:
    """Serves raw records from a JSON file shaped like the CMS response.

    The file holds either a list of objects or ``{"objects": [...],
    "categories": [...]}``.
    """

    def __init__(self, data_file: Path, object_type: Optional[str] = None) -> None:
        self._data_file = data_file
        self._object_type = object_type

    def fetch_catalog(self) -> List[Dict[str, Any]]:
        objects = self._load().get("objects", [])
        if self._object_type:
            objects = [o for o in objects if o.get("type") in (None, self._object_type)]
        return objects

    def fetch_catalog_item(self, slug: str) -> Optional[Dict[str, Any]]:
        for item in self.fetch_catalog():
            if item.get("slug") == slug:
                return item
        return None

    def fetch_categories(self) -> List[Dict[str, Any]]:
        return self._load().get("categories", [])

    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        if not self._data_file.exists():
            return {"objects": [], "categories": []}
        try:
            text = self._data_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CatalogFetchError(f"catalog file could not be read: {self._data_file}") from exc
        if not text.strip():
            return {"objects": [], "categories": []}
        try:
            payload = json.loads(text)
        except ValueError as exc:
            raise CatalogFetchError(f"catalog file is not valid JSON: {self._data_file}") from exc
        if isinstance(payload, list):
            payload = {"objects": payload}
        if not isinstance(payload, dict):
            raise CatalogFetchError("catalog file must hold a list or an object")
        objects = payload.get("objects")
        categories = payload.get("categories")
        return {
            "objects": [o for o in objects if isinstance(o, dict)] if isinstance(objects, list) else [],
            "categories": [c for c in categories if isinstance(c, dict)] if isinstance(categories, list) else [],
        }
