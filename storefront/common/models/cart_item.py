from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List

from .catalog_item import CatalogItem


@dataclass
class CartLineItem:
    id: str
    item: CatalogItem
    quantity: int
    unit_price: float

    @property
    def line_total(self) -> float:
        return float(Decimal(str(self.unit_price)) * Decimal(self.quantity))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "item": self.item.to_dict(),
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
        }


@dataclass
class CartSnapshot:
    """Line items in insertion order; totals are recomputed on every read."""

    lines: List[CartLineItem] = field(default_factory=list)

    @property
    def subtotal(self) -> float:
        total = sum(
            (Decimal(str(line.unit_price)) * Decimal(line.quantity) for line in self.lines),
            Decimal("0"),
        )
        return float(total)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [line.to_dict() for line in self.lines],
            "subtotal": self.subtotal,
            "itemCount": self.item_count,
        }
