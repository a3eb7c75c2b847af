from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from storefront.app import create_app
from storefront.common.errors import CatalogFetchError
from storefront.common.services.catalog_service import CatalogService
from storefront.common.services.contact_service import ContactService
from storefront.common.services.order_service import OrderService
from storefront.config import StorefrontConfig


SEED_PRODUCTS: List[Dict[str, Any]] = [
    {
        "id": "p-thhn",
        "slug": "thhn-building-wire",
        "title": "THHN Building Wire 12 AWG",
        "type": "products",
        "created_at": "2024-03-01T10:00:00.000Z",
        "metadata": {
            "description": "Copper building wire for residential circuits.",
            "price": 89.5,
            "category": {"id": "c1", "title": "Building Wire", "slug": "building-wire"},
            "stock_quantity": 40,
            "usage_type": "residential",
            "featured_image": {"url": "https://cdn.example.com/thhn.jpg", "imgix_url": "https://imgix.net/thhn.jpg"},
        },
    },
    {
        "id": "p-armored",
        "slug": "armored-power-cable",
        "title": "Armored Power Cable",
        "type": "products",
        "created_at": "2024-05-10T08:30:00.000Z",
        "metadata": {
            "description": "Steel armored cable for industrial sites.",
            "price": "349.99",
            "category": {"id": "c2", "title": "Power Cable", "slug": "power-cable"},
            "stock_quantity": 0,
            "usage_type": "industrial",
            "features": "armored, XLPE insulation",
        },
    },
    {
        "id": "p-coax",
        "slug": "coaxial-cable-rg6",
        "title": "Coaxial Cable RG6",
        "type": "products",
        "created_at": "2024-01-15T12:00:00.000Z",
        "metadata": {
            "description": "Low-loss coax for TV and broadband.",
            "price": 45,
            "category": "Data Cable",
            "features": ["shielded", "", " outdoor rated "],
        },
    },
]

SEED_SERVICES: List[Dict[str, Any]] = [
    {
        "id": "s-writing",
        "slug": "rfp-response-writing-service",
        "title": "RFP Response Writing Service",
        "type": "rfp-services",
        "created_at": "2024-02-01T00:00:00Z",
        "metadata": {
            "description": "Professional RFP response writing by experienced proposal writers.",
            "price": 899,
            "delivery_time": "5-7 business days",
            "category": "Writing",
            "features": "Compliance matrix, Executive summary, Two revisions",
            "service_type": "writing",
        },
    },
    {
        "id": "s-emergency",
        "slug": "emergency-rfp-review",
        "title": "Emergency RFP Review",
        "type": "rfp-services",
        "created_at": "2024-02-01T00:00:00Z",
        "metadata": {
            "description": "Same-day review of a draft proposal.",
            "price": 499,
            "delivery_time": "24 hours",
            "category": "Review",
            "service_type": "emergency",
        },
    },
    {
        "id": "s-development",
        "slug": "proposal-development",
        "title": "Proposal Development",
        "type": "rfp-services",
        "created_at": "2024-04-20T00:00:00Z",
        "metadata": {
            "description": "Complete proposal development from idea to submission.",
            "price": 1499,
            "delivery_time": "10-14 business days",
            "category": "Development",
            "features": None,
            "service_type": "consulting",
        },
    },
]


class StubProvider:
    """In-memory stand-in for the content API."""

    def __init__(self, records=None, categories=None, fail: bool = False) -> None:
        self.records = copy.deepcopy(records if records is not None else SEED_PRODUCTS)
        self.categories = copy.deepcopy(categories or [])
        self.fail = fail
        self.calls = 0

    def fetch_catalog(self) -> List[Dict[str, Any]]:
        self.calls += 1
        if self.fail:
            raise CatalogFetchError("provider down", status_code=503)
        return copy.deepcopy(self.records)

    def fetch_catalog_item(self, slug: str) -> Optional[Dict[str, Any]]:
        if self.fail:
            raise CatalogFetchError("provider down", status_code=503)
        for r in self.records:
            if r.get("slug") == slug:
                return copy.deepcopy(r)
        return None

    def fetch_categories(self) -> List[Dict[str, Any]]:
        if self.fail:
            raise CatalogFetchError("provider down", status_code=503)
        return copy.deepcopy(self.categories)


def make_response(status_code: int = 201, body: Any = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body if body is not None else {"id": "order-123"}
    return response


@pytest.fixture
def provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def http() -> MagicMock:
    session = MagicMock()
    session.post.return_value = make_response()
    return session


@pytest.fixture
def config(tmp_path) -> StorefrontConfig:
    return StorefrontConfig.load(
        data_dir=tmp_path / "data",
        secret_key="test-secret",
        currency="USD",
        catalog_type="products",
        cosmic_bucket_slug="",
        cosmic_read_key="",
        cart_storage="file",
        cart_storage_key="storefront-cart",
        catalog_cache_ttl=0,
        log_level="ERROR",
    )


@pytest.fixture
def app(config, provider, http):
    components = {
        "catalog": CatalogService(provider, cache_ttl_seconds=0),
        "orders": OrderService("https://orders.example.com/api/orders", http=http),
        "contact": ContactService("https://orders.example.com/api/contact", http=http),
    }
    application = create_app(config, components)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()
