"""Storefront Flask application (cable catalog / RFP services marketplace)."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import Flask

from .common.services.catalog_service import CatalogService
from .common.services.contact_service import ContactService
from .common.services.logging import set_log_level
from .common.services.order_service import OrderService
from .config import StorefrontConfig
from .routes import api
from .services import CosmicCatalogProvider, LocalCatalogProvider


def build_components(config: StorefrontConfig, provider: Optional[Any] = None) -> Dict[str, Any]:
    if provider is None:
        if config.uses_cosmic:
            provider = CosmicCatalogProvider(
                bucket_slug=config.cosmic_bucket_slug,
                read_key=config.cosmic_read_key,
                object_type=config.catalog_type,
                api_url=config.cosmic_api_url,
                timeout=config.http_timeout,
            )
        else:
            provider = LocalCatalogProvider(config.local_catalog_file, object_type=config.catalog_type)
    return {
        "catalog": CatalogService(provider, cache_ttl_seconds=config.catalog_cache_ttl),
        "orders": OrderService(
            config.order_endpoint_url,
            timeout=config.http_timeout,
            currency=config.currency,
            tax_rate=config.tax_rate,
            shipping_flat=config.shipping_flat,
            free_shipping_threshold=config.free_shipping_threshold,
        ),
        "contact": ContactService(config.contact_endpoint_url, timeout=config.http_timeout),
    }


def create_app(config: Optional[StorefrontConfig] = None, components: Optional[Dict[str, Any]] = None) -> Flask:
    config = config or StorefrontConfig.load()
    set_log_level(config.log_level)
    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["STOREFRONT_CONFIG"] = config

    merged = build_components(config)
    merged.update(components or {})
    app.extensions["storefront_components"] = merged

    app.register_blueprint(api.api_bp)
    return app


def main() -> None:
    config = StorefrontConfig.load()
    logging.basicConfig(level=config.log_level.upper())
    app = create_app(config)
    app.run(host="0.0.0.0", port=5000, debug=False)


if __name__ == "__main__":
    main()
