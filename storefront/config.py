"""Storefront settings."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv


CATALOG_TYPES = {"products", "rfp-services"}
CART_STORAGE_BACKENDS = {"file", "session"}


def validate_currency(value: Optional[str]) -> str:
    v = (value or "USD").strip().upper()
    if len(v) != 3:
        raise ValueError("Invalid currency code: expected ISO4217 length 3")
    return v


def _load_settings_file(path: Path) -> Dict[str, Any]:
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                return data
    except (OSError, ValueError) as exc:
        print(f"[StorefrontConfig] failed to read {path}: {exc}")
    return {}


@dataclass
class StorefrontConfig:
    """Settings for one storefront variant (cable catalog or RFP services)."""

    secret_key: str
    log_level: str
    store_base_url: str
    currency: str
    catalog_type: str
    cosmic_bucket_slug: str
    cosmic_read_key: str
    cosmic_api_url: str
    order_endpoint_url: str
    contact_endpoint_url: str
    http_timeout: float
    cart_storage: str
    cart_storage_key: str
    catalog_cache_ttl: int
    fallback_image_url: str
    tax_rate: float
    shipping_flat: float
    free_shipping_threshold: float
    data_dir: Path

    @property
    def cart_dir(self) -> Path:
        return self.data_dir / "carts"

    @property
    def settings_file(self) -> Path:
        return self.data_dir / "settings.json"

    @property
    def local_catalog_file(self) -> Path:
        return self.data_dir / "catalog.json"

    @property
    def uses_cosmic(self) -> bool:
        return bool(self.cosmic_bucket_slug and self.cosmic_read_key)

    @classmethod
    def load(cls, data_dir: Optional[Path] = None, **overrides: Any) -> "StorefrontConfig":
        """Build settings from data/settings.json, then the environment, then defaults."""

        load_dotenv()
        if data_dir is None:
            data_dir = Path(os.environ.get("STOREFRONT_DATA_DIR") or Path.cwd() / "data")
        data_dir = Path(data_dir)
        s = _load_settings_file(data_dir / "settings.json")

        def get(key: str, default: Any) -> Any:
            if key.lower() in overrides:
                return overrides[key.lower()]
            value = s.get(key)
            if value is None or value == "":
                value = os.environ.get(key)
            return default if value is None or value == "" else value

        store_base_url = str(get("STORE_BASE_URL", "http://127.0.0.1:5000")).rstrip("/")
        catalog_type = str(get("CATALOG_TYPE", "products"))
        if catalog_type not in CATALOG_TYPES:
            raise ValueError(f"CATALOG_TYPE must be one of {sorted(CATALOG_TYPES)}")
        cart_storage = str(get("CART_STORAGE", "file"))
        if cart_storage not in CART_STORAGE_BACKENDS:
            raise ValueError(f"CART_STORAGE must be one of {sorted(CART_STORAGE_BACKENDS)}")

        config = cls(
            secret_key=str(get("SECRET_KEY", "dev_secret")),
            log_level=str(get("LOG_LEVEL", "INFO")),
            store_base_url=store_base_url,
            currency=validate_currency(get("CURRENCY", None)),
            catalog_type=catalog_type,
            cosmic_bucket_slug=str(get("COSMIC_BUCKET_SLUG", "")),
            cosmic_read_key=str(get("COSMIC_READ_KEY", "")),
            cosmic_api_url=str(get("COSMIC_API_URL", "https://api.cosmicjs.com/v3")),
            order_endpoint_url=str(get("ORDER_ENDPOINT_URL", f"{store_base_url}/api/orders")),
            contact_endpoint_url=str(get("CONTACT_ENDPOINT_URL", f"{store_base_url}/api/contact-messages")),
            http_timeout=float(get("HTTP_TIMEOUT", 10)),
            cart_storage=cart_storage,
            cart_storage_key=str(get("CART_STORAGE_KEY", "storefront-cart")),
            catalog_cache_ttl=int(get("CATALOG_CACHE_TTL", 60)),
            fallback_image_url=str(
                get(
                    "FALLBACK_IMAGE_URL",
                    "https://images.unsplash.com/photo-1551288049-bebda4e38f71?w=600&h=400&fit=crop&auto=format",
                )
            ),
            tax_rate=float(get("TAX_RATE", 0.08)),
            shipping_flat=float(get("SHIPPING_FLAT", 15)),
            free_shipping_threshold=float(get("FREE_SHIPPING_THRESHOLD", 100)),
            data_dir=data_dir,
        )

        config.data_dir.mkdir(parents=True, exist_ok=True)
        config.cart_dir.mkdir(parents=True, exist_ok=True)
        if not config.local_catalog_file.exists():
            config.local_catalog_file.write_text("[]", encoding="utf-8")
        return config
