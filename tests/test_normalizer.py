from __future__ import annotations

import pytest

from storefront.common.models.catalog_item import CatalogItem, CategoryRef, ImageRef
from storefront.common.services.normalizer import normalize, normalize_all, normalize_features, slugify

from conftest import SEED_PRODUCTS, SEED_SERVICES


def test_features_from_comma_string() -> None:
    assert normalize({"features": "a, b ,c"}).features == ["a", "b", "c"]


def test_features_from_list_drops_blank_and_non_strings() -> None:
    assert normalize({"features": ["a", "", " b "]}).features == ["a", "b"]
    assert normalize_features(["x", 3, None, "  "]) == ["x"]


def test_features_missing_or_null_is_empty_list() -> None:
    assert normalize({"features": None}).features == []
    assert normalize({}).features == []
    assert normalize({"features": 42}).features == []


def test_single_value_string_becomes_one_item_list() -> None:
    assert normalize({"features": "Compliance checking"}).features == ["Compliance checking"]


def test_fields_are_read_from_metadata() -> None:
    item = normalize(SEED_SERVICES[0])
    assert item.id == "s-writing"
    assert item.price == 899.0
    assert item.delivery_time == "5-7 business days"
    assert item.service_type == "writing"
    assert item.features == ["Compliance matrix", "Executive summary", "Two revisions"]
    assert item.category == CategoryRef(title="Writing", slug="writing")


@pytest.mark.parametrize(
    "raw, expected",
    [(12, 12.0), ("349.99", 349.99), ("abc", 0.0), (None, 0.0), (True, 0.0), (-5, 0.0), (float("nan"), 0.0), (10**400, 0.0), ("1e400", 0.0)],
)
def test_price_coercion(raw, expected) -> None:
    assert normalize({"metadata": {"price": raw}}).price == expected


def test_text_defaults() -> None:
    item = normalize({"metadata": {"description": 5, "delivery_time": [], "service_type": None}})
    assert item.description == ""
    assert item.delivery_time == "N/A"
    assert item.service_type == "standard"


def test_category_string_is_wrapped_with_derived_slug() -> None:
    item = normalize({"metadata": {"category": "Data  Cable"}})
    assert item.category == CategoryRef(title="Data  Cable", slug="data-cable")
    assert slugify(" Power Cable ") == "power-cable"


def test_category_reference_passes_through() -> None:
    item = normalize(SEED_PRODUCTS[0])
    assert item.category == CategoryRef(title="Building Wire", slug="building-wire")


def test_category_of_unknown_shape_is_dropped() -> None:
    assert normalize({"metadata": {"category": 7}}).category is None
    assert normalize({"metadata": {"category": "   "}}).category is None
    assert normalize({"metadata": {"category": {}}}).category is None


def test_featured_image_left_unset_without_urls() -> None:
    assert normalize({"metadata": {"featured_image": {}}}).featured_image is None
    assert normalize({"metadata": {"featured_image": {"url": "u"}}}).featured_image == ImageRef(url="u")


def test_stock_quantity_is_non_negative_or_absent() -> None:
    assert normalize({"metadata": {"stock_quantity": -3}}).stock_quantity == 0
    assert normalize({"metadata": {"stock_quantity": "12"}}).stock_quantity == 12
    assert normalize({"metadata": {}}).stock_quantity is None
    assert normalize({"metadata": {"stock_quantity": 10**400}}).stock_quantity == 10**400
    assert normalize({"metadata": {"stock_quantity": float("inf"), "delivery_days": float("nan")}}).stock_quantity is None


@pytest.mark.parametrize("raw", [None, {}, [], "text", 17, SEED_PRODUCTS[0], SEED_PRODUCTS[1], SEED_SERVICES[2]])
def test_normalize_is_idempotent(raw) -> None:
    once = normalize(raw)
    assert isinstance(once, CatalogItem)
    assert normalize(once) == once
    assert normalize(once.to_dict()) == once
    assert normalize(normalize(raw)) == normalize(raw)


def test_missing_identity_gets_placeholders() -> None:
    item = normalize(None)
    assert item.title == "Untitled"
    assert item.id
    assert item.slug == item.id
    assert normalize({}) == item
    assert normalize({"metadata": {"price": 5}}).id != item.id
    named = normalize({"title": "Fiber Optic Patch Cord"})
    assert named.slug == "fiber-optic-patch-cord"
    assert named.id == "fiber-optic-patch-cord"


def test_normalize_all_tolerates_non_list() -> None:
    assert normalize_all(None) == []
    assert [i.id for i in normalize_all(SEED_PRODUCTS)] == ["p-thhn", "p-armored", "p-coax"]
