"""JSON API for the catalog, the cart and the checkout/contact forms."""

from __future__ import annotations

from typing import Any, Dict
from uuid import uuid4

from flask import Blueprint, current_app, g, jsonify, request, session

from ..common.models.cart_item import CartSnapshot
from ..common.models.order import CheckoutFormData, ContactFormData
from ..common.services.cart_service import CartStore
from ..common.utils.dto import to_catalog_dto, to_category_dto
from ..common.utils.validators import ensure_int, ensure_positive_int
from ..services import JsonFileCartStorage, SessionCartStorage


api_bp = Blueprint("storefront_api", __name__, url_prefix="/api")


def _components() -> Dict[str, Any]:
    return current_app.extensions["storefront_components"]


def _config():
    return current_app.config["STOREFRONT_CONFIG"]


def _cart() -> CartStore:
    """The visitor's cart, loaded once per request from its storage."""
    store = g.get("cart_store")
    if store is not None:
        return store
    cfg = _config()
    if cfg.cart_storage == "session":
        store = CartStore(SessionCartStorage(session), key=cfg.cart_storage_key)
    else:
        cart_id = session.get("cart_id")
        if not cart_id:
            cart_id = uuid4().hex
            session["cart_id"] = cart_id
        store = CartStore(JsonFileCartStorage(cfg.cart_dir), key=f"{cfg.cart_storage_key}-{cart_id}")
    g.cart_store = store.load()
    return store


def _dto(item) -> Dict[str, Any]:
    cfg = _config()
    return to_catalog_dto(item, cfg.fallback_image_url, cfg.currency)


def _cart_payload(snapshot: CartSnapshot) -> Dict[str, Any]:
    return {"cart": snapshot.to_dict(), "totals": _components()["orders"].totals(snapshot)}


@api_bp.get("/catalog")
def list_catalog():
    listing = _components()["catalog"].load_listing(request.args)
    return jsonify(
        {
            "items": [_dto(i) for i in listing["items"]],
            "categories": to_category_dto(listing["categories"]),
            "total": listing["total"],
            "shown": listing["shown"],
            "sort": listing["sort"],
            "query": listing["query"],
        }
    )


@api_bp.get("/catalog/<slug>")
def get_catalog_item(slug: str):
    item = _components()["catalog"].get_item(slug)
    if item is None:
        return jsonify({"error": "Item not found."}), 404
    return jsonify({"item": _dto(item)})


@api_bp.get("/categories")
def list_categories():
    categories = _components()["catalog"].list_categories()
    return jsonify({"categories": to_category_dto(categories)})


@api_bp.get("/cart")
def get_cart():
    return jsonify(_cart_payload(_cart().snapshot()))


@api_bp.post("/cart/items")
def add_cart_item():
    payload = request.get_json(silent=True) or {}
    slug = str(payload.get("slug", "")).strip()
    if not slug:
        return jsonify({"error": "slug required"}), 400
    try:
        quantity = ensure_positive_int(payload.get("quantity", 1), "quantity")
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    item = _components()["catalog"].get_item(slug)
    if item is None:
        return jsonify({"error": "Item not found."}), 404
    snapshot = _cart().add_item(item, quantity)
    return jsonify(_cart_payload(snapshot))


@api_bp.put("/cart/items/<item_id>")
def update_cart_item(item_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        quantity = ensure_int(payload.get("quantity"), "quantity")
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    snapshot = _cart().update_quantity(item_id, quantity)
    return jsonify(_cart_payload(snapshot))


@api_bp.delete("/cart/items/<item_id>")
def remove_cart_item(item_id: str):
    snapshot = _cart().remove_item(item_id)
    return jsonify(_cart_payload(snapshot))


@api_bp.delete("/cart")
def clear_cart():
    return jsonify(_cart_payload(_cart().clear()))


@api_bp.post("/checkout")
def checkout():
    form = CheckoutFormData.from_dict(request.get_json(silent=True))
    result = _components()["orders"].submit(_cart(), form)
    if result["status"] == "invalid":
        return jsonify(result), 400
    if result["status"] == "error":
        return jsonify(result), 502
    return jsonify(result)


@api_bp.post("/payment/<order_id>/confirm")
def confirm_payment(order_id: str):
    return jsonify(_components()["orders"].confirm_payment(_cart(), order_id))


@api_bp.post("/contact")
def submit_contact():
    form = ContactFormData.from_dict(request.get_json(silent=True))
    result = _components()["contact"].submit(form)
    if result["status"] == "invalid":
        return jsonify(result), 400
    if result["status"] == "error":
        return jsonify(result), 502
    return jsonify(result)
