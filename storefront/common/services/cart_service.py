from __future__ import annotations

import copy
import json
import math
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Protocol, Sequence, Union

from ..models.cart_item import CartLineItem, CartSnapshot
from ..models.catalog_item import CatalogItem
from .logging import log_event
from .normalizer import normalize


# --- actions ---

@dataclass(frozen=True)
class AddToCart:
    item: CatalogItem
    quantity: int = 1


@dataclass(frozen=True)
class RemoveFromCart:
    item_id: str


@dataclass(frozen=True)
class UpdateQuantity:
    item_id: str
    quantity: int


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class LoadCart:
    lines: Sequence[CartLineItem] = field(default_factory=tuple)


CartAction = Union[AddToCart, RemoveFromCart, UpdateQuantity, ClearCart, LoadCart]


def cart_reducer(state: Sequence[CartLineItem], action: CartAction) -> List[CartLineItem]:
    """Apply one action and return the new line list; ``state`` is left untouched."""
    if isinstance(action, AddToCart):
        if action.quantity < 1:
            return list(state)
        if any(line.id == action.item.id for line in state):
            return [
                replace(line, quantity=line.quantity + action.quantity) if line.id == action.item.id else line
                for line in state
            ]
        snapshot = copy.deepcopy(action.item)
        return list(state) + [
            CartLineItem(id=snapshot.id, item=snapshot, quantity=action.quantity, unit_price=snapshot.price)
        ]
    if isinstance(action, RemoveFromCart):
        return [line for line in state if line.id != action.item_id]
    if isinstance(action, UpdateQuantity):
        if action.quantity <= 0:
            return [line for line in state if line.id != action.item_id]
        return [replace(line, quantity=action.quantity) if line.id == action.item_id else line for line in state]
    if isinstance(action, ClearCart):
        return []
    if isinstance(action, LoadCart):
        return list(action.lines)
    return list(state)


# --- persisted form ---

def serialize_lines(lines: Sequence[CartLineItem]) -> str:
    return json.dumps([line.to_dict() for line in lines], ensure_ascii=False)


def _parse_line(entry: Any) -> Optional[CartLineItem]:
    if not isinstance(entry, dict) or not isinstance(entry.get("item"), dict):
        return None
    quantity = entry.get("quantity")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        return None
    item = normalize(entry["item"])
    line_id = entry.get("id")
    if line_id != item.id:
        return None
    unit_price = entry.get("unitPrice", item.price)
    if isinstance(unit_price, bool) or not isinstance(unit_price, (int, float)):
        return None
    try:
        unit_price = float(unit_price)
    except OverflowError:
        return None
    if not math.isfinite(unit_price) or unit_price < 0:
        return None
    return CartLineItem(id=item.id, item=item, quantity=quantity, unit_price=unit_price)


def deserialize_lines(text: Optional[str]) -> List[CartLineItem]:
    """Read stored lines back; anything unreadable is dropped rather than raised."""
    if not text:
        return []
    try:
        payload = json.loads(text)
    except (TypeError, ValueError):
        return []
    if not isinstance(payload, list):
        return []
    lines: List[CartLineItem] = []
    for entry in payload:
        line = _parse_line(entry)
        if line is None:
            continue
        existing = next((i for i, l in enumerate(lines) if l.id == line.id), None)
        if existing is None:
            lines.append(line)
        else:
            lines[existing] = replace(lines[existing], quantity=lines[existing].quantity + line.quantity)
    return lines


class CartStorage(Protocol):
    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...


class CartStore:
    """Session-lifetime cart: loads once from storage, persists after every action."""

    def __init__(self, storage: CartStorage, key: str = "storefront-cart") -> None:
        self._storage = storage
        self._key = key
        self._lines: List[CartLineItem] = []
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> "CartStore":
        if self._loaded:
            return self
        self._loaded = True
        raw = self._storage.read(self._key)
        lines = deserialize_lines(raw)
        if raw and not lines and raw.strip() != "[]":
            log_event("warning", "cart.load_discarded", key=self._key)
        self._lines = cart_reducer(self._lines, LoadCart(tuple(lines)))
        log_event("debug", "cart.loaded", key=self._key, lines=len(lines))
        return self

    def dispatch(self, action: CartAction) -> CartSnapshot:
        if not self._loaded:
            self.load()
        self._lines = cart_reducer(self._lines, action)
        self._storage.write(self._key, serialize_lines(self._lines))
        log_event("debug", "cart.updated", action=type(action).__name__, lines=len(self._lines))
        return self.snapshot()

    def add_item(self, item: CatalogItem, quantity: int = 1) -> CartSnapshot:
        if not isinstance(item, CatalogItem):
            raise ValueError("item required")
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValueError("quantity must be an integer")
        if quantity < 1:
            raise ValueError("quantity must be > 0")
        return self.dispatch(AddToCart(item=item, quantity=quantity))

    def remove_item(self, item_id: str) -> CartSnapshot:
        return self.dispatch(RemoveFromCart(item_id=item_id))

    def update_quantity(self, item_id: str, quantity: int) -> CartSnapshot:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValueError("quantity must be an integer")
        return self.dispatch(UpdateQuantity(item_id=item_id, quantity=quantity))

    def clear(self) -> CartSnapshot:
        return self.dispatch(ClearCart())

    @property
    def lines(self) -> List[CartLineItem]:
        return list(self._lines)

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(lines=list(self._lines))

    @property
    def subtotal(self) -> float:
        return self.snapshot().subtotal

    @property
    def item_count(self) -> int:
        return self.snapshot().item_count
