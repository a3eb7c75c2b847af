from __future__ import annotations

from storefront.common.services.cart_service import CartStore
from storefront.common.services.normalizer import normalize
from storefront.services import JsonFileCartStorage, SessionCartStorage


ITEM = normalize({"id": "p1", "slug": "p1", "title": "Patch Cord", "metadata": {"price": 4.25}})


def test_file_storage_survives_a_new_store(tmp_path) -> None:
    storage = JsonFileCartStorage(tmp_path / "carts")
    CartStore(storage, key="storefront-cart-abc").load().add_item(ITEM, 4)

    restored = CartStore(JsonFileCartStorage(tmp_path / "carts"), key="storefront-cart-abc").load()
    assert restored.item_count == 4
    assert restored.subtotal == 17.0


def test_file_storage_sanitizes_keys(tmp_path) -> None:
    storage = JsonFileCartStorage(tmp_path)
    storage.write("../escape/cart", "[]")
    assert (tmp_path / ".._escape_cart.json").exists()
    assert storage.read("../escape/cart").strip() == "[]"
    assert storage.read("missing") is None


def test_corrupt_file_yields_empty_cart(tmp_path) -> None:
    (tmp_path / "cart.json").write_text("{broken", encoding="utf-8")
    store = CartStore(JsonFileCartStorage(tmp_path), key="cart").load()
    assert store.lines == []


def test_session_storage_round_trip() -> None:
    session = {}
    CartStore(SessionCartStorage(session), key="cart").load().add_item(ITEM, 1)
    assert isinstance(session["cart"], str)
    restored = CartStore(SessionCartStorage(session), key="cart").load()
    assert [line.id for line in restored.lines] == ["p1"]


def test_session_storage_ignores_non_string_values() -> None:
    assert SessionCartStorage({"cart": ["not", "serialized"]}).read("cart") is None
