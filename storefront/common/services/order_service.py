from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, Optional

import requests

from ..models.cart_item import CartSnapshot
from ..models.order import IMMEDIATE_CAPTURE_METHODS, PAYMENT_METHODS, CheckoutFormData, OrderPayload
from ..utils.validators import is_blank, is_valid_email
from .cart_service import CartStore
from .logging import log_event


GENERIC_ORDER_ERROR = "There was an error processing your order. Please try again."
EMPTY_CART_ERROR = "Your cart is empty."

_REQUIRED_FIELDS: Dict[str, Callable[[CheckoutFormData], str]] = {
    "customerName": lambda f: f.customer_name,
    "street": lambda f: f.address.street,
    "city": lambda f: f.address.city,
    "state": lambda f: f.address.state,
    "zip": lambda f: f.address.zip,
}
_REQUIRED_MESSAGES = {
    "customerName": "Name is required",
    "street": "Street address is required",
    "city": "City is required",
    "state": "State is required",
    "zip": "ZIP code is required",
}
CHECKOUT_FIELDS = ("customerName", "email", "street", "city", "state", "zip", "paymentMethod")


def validate_field(form: CheckoutFormData, field: str) -> Optional[str]:
    """Error message for one checkout field, or None once it is valid."""
    if field == "email":
        if is_blank(form.email):
            return "Email is required"
        if not is_valid_email(form.email):
            return "Please enter a valid email address"
        return None
    if field == "paymentMethod":
        return None if form.payment_method in PAYMENT_METHODS else "Please choose a payment method"
    getter = _REQUIRED_FIELDS.get(field)
    if getter is None:
        return None
    return _REQUIRED_MESSAGES[field] if is_blank(getter(form)) else None


def validate_checkout(form: CheckoutFormData) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for field in CHECKOUT_FIELDS:
        message = validate_field(form, field)
        if message:
            errors[field] = message
    return errors


def _cents(value: Decimal) -> float:
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_totals(
    subtotal: float,
    *,
    tax_rate: float = 0.08,
    shipping_flat: float = 15.0,
    free_shipping_threshold: float = 100.0,
) -> Dict[str, float]:
    """Tax on the subtotal plus flat shipping, waived above the threshold."""
    sub = Decimal(str(subtotal))
    tax = sub * Decimal(str(tax_rate))
    if sub == 0 or sub > Decimal(str(free_shipping_threshold)):
        shipping = Decimal("0")
    else:
        shipping = Decimal(str(shipping_flat))
    return {
        "subtotal": _cents(sub),
        "tax": _cents(tax),
        "shipping": _cents(shipping),
        "total": _cents(sub + tax + shipping),
    }


def assemble_order(
    cart: CartSnapshot,
    form: CheckoutFormData,
    *,
    currency: str = "USD",
    tax_rate: float = 0.08,
    shipping_flat: float = 15.0,
    free_shipping_threshold: float = 100.0,
) -> OrderPayload:
    totals = compute_totals(
        cart.subtotal,
        tax_rate=tax_rate,
        shipping_flat=shipping_flat,
        free_shipping_threshold=free_shipping_threshold,
    )
    buyer: Dict[str, Any] = {
        "customerName": form.customer_name.strip(),
        "email": form.email.strip(),
        "address": {k: v.strip() for k, v in form.address.to_dict().items()},
    }
    if form.phone.strip():
        buyer["phone"] = form.phone.strip()
    if form.company.strip():
        buyer["company"] = form.company.strip()
    line_items = []
    for line in cart.lines:
        entry = line.to_dict()
        entry["title"] = line.item.title
        entry["lineTotal"] = line.line_total
        line_items.append(entry)
    return OrderPayload(
        buyer_info=buyer,
        line_items=line_items,
        subtotal=totals["subtotal"],
        tax=totals["tax"],
        shipping=totals["shipping"],
        total=totals["total"],
        currency=currency,
        payment_method=form.payment_method,
        notes=form.notes.strip(),
    )


def _created_order_id(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    for candidate in (body, body.get("object"), body.get("order"), body.get("data")):
        if isinstance(candidate, dict):
            for key in ("id", "order_id", "orderId"):
                value = candidate.get(key)
                if isinstance(value, (str, int)) and not isinstance(value, bool) and str(value):
                    return str(value)
    return None


class OrderService:
    """Checkout: validate the buyer form, assemble the order and post it to the order endpoint."""

    def __init__(
        self,
        endpoint_url: str,
        *,
        http: Optional[requests.Session] = None,
        timeout: float = 10,
        currency: str = "USD",
        tax_rate: float = 0.08,
        shipping_flat: float = 15.0,
        free_shipping_threshold: float = 100.0,
    ) -> None:
        self._endpoint_url = endpoint_url
        self._http = http or requests.Session()
        self._timeout = timeout
        self._currency = currency
        self._tax_rate = tax_rate
        self._shipping_flat = shipping_flat
        self._free_shipping_threshold = free_shipping_threshold

    def totals(self, cart: CartSnapshot) -> Dict[str, float]:
        return compute_totals(
            cart.subtotal,
            tax_rate=self._tax_rate,
            shipping_flat=self._shipping_flat,
            free_shipping_threshold=self._free_shipping_threshold,
        )

    def assemble(self, cart: CartSnapshot, form: CheckoutFormData) -> OrderPayload:
        return assemble_order(
            cart,
            form,
            currency=self._currency,
            tax_rate=self._tax_rate,
            shipping_flat=self._shipping_flat,
            free_shipping_threshold=self._free_shipping_threshold,
        )

    def submit(self, cart: CartStore, form: CheckoutFormData) -> Dict[str, Any]:
        """Submit the current cart.

        Returns a dict whose ``status`` is ``invalid`` (field errors, nothing
        sent), ``error`` (generic message, cart untouched) or ``ok`` with the
        created order id and where to send the buyer next.
        """
        errors = validate_checkout(form)
        snapshot = cart.snapshot()
        if snapshot.is_empty:
            errors["cart"] = EMPTY_CART_ERROR
        if errors:
            return {"status": "invalid", "errors": errors}

        payload = self.assemble(snapshot, form)
        try:
            response = self._http.post(self._endpoint_url, json=payload.to_dict(), timeout=self._timeout)
        except requests.exceptions.RequestException as exc:
            log_event("error", "order.failed", reason=f"{type(exc).__name__}: {exc}")
            return {"status": "error", "message": GENERIC_ORDER_ERROR}
        if not 200 <= response.status_code < 300:
            log_event("error", "order.failed", reason=f"HTTP {response.status_code}")
            return {"status": "error", "message": GENERIC_ORDER_ERROR}
        try:
            order_id = _created_order_id(response.json())
        except ValueError:
            order_id = None
        if not order_id:
            log_event("error", "order.failed", reason="no order id in response")
            return {"status": "error", "message": GENERIC_ORDER_ERROR}

        log_event(
            "info",
            "order.submitted",
            order_id=order_id,
            items=len(payload.line_items),
            total=payload.total,
            payment_method=payload.payment_method,
        )
        if form.payment_method in IMMEDIATE_CAPTURE_METHODS:
            # cart stays until the payment step confirms
            return {"status": "ok", "order_id": order_id, "redirect": f"/payment/{order_id}", "cart_cleared": False}
        cart.clear()
        return {
            "status": "ok",
            "order_id": order_id,
            "redirect": f"/order-confirmation/{order_id}",
            "cart_cleared": True,
        }

    def confirm_payment(self, cart: CartStore, order_id: str) -> Dict[str, Any]:
        cart.clear()
        log_event("info", "order.payment_confirmed", order_id=order_id)
        return {"status": "ok", "order_id": order_id, "redirect": f"/order-confirmation/{order_id}"}
