from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


PAYMENT_METHODS = ("card", "paypal", "bank_transfer")
# Methods captured on the payment page right after the order is created.
IMMEDIATE_CAPTURE_METHODS = {"card"}


def _text(data: Dict[str, Any], *keys: str, default: str = "") -> str:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str):
            return value
    return default


@dataclass
class Address:
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    country: str = "United States"

    def to_dict(self) -> Dict[str, str]:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "country": self.country,
        }


@dataclass
class CheckoutFormData:
    customer_name: str = ""
    email: str = ""
    phone: str = ""
    company: str = ""
    address: Address = field(default_factory=Address)
    payment_method: str = "card"
    notes: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CheckoutFormData":
        """Build from a posted form; accepts camelCase or snake_case keys."""
        data = data if isinstance(data, dict) else {}
        addr = data.get("address")
        addr = addr if isinstance(addr, dict) else {}
        return cls(
            customer_name=_text(data, "customerName", "customer_name"),
            email=_text(data, "email"),
            phone=_text(data, "phone"),
            company=_text(data, "company"),
            address=Address(
                street=_text(addr, "street"),
                city=_text(addr, "city"),
                state=_text(addr, "state"),
                zip=_text(addr, "zip", "postalCode", "postal_code"),
                country=_text(addr, "country", default="United States"),
            ),
            payment_method=_text(data, "paymentMethod", "payment_method", default="card"),
            notes=_text(data, "notes"),
        )


@dataclass
class OrderPayload:
    buyer_info: Dict[str, Any]
    line_items: List[Dict[str, Any]]
    subtotal: float
    tax: float
    shipping: float
    total: float
    currency: str
    payment_method: str
    notes: str = ""
    status: str = "pending"
    payment_status: str = "pending"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "buyerInfo": self.buyer_info,
            "lineItems": self.line_items,
            "subtotal": self.subtotal,
            "tax": self.tax,
            "shipping": self.shipping,
            "total": self.total,
            "currency": self.currency,
            "paymentMethod": self.payment_method,
            "paymentStatus": self.payment_status,
            "status": self.status,
            "notes": self.notes,
        }


INQUIRY_TYPES = ("general", "distributor", "support", "bulk_order")


@dataclass
class ContactFormData:
    name: str = ""
    email: str = ""
    phone: str = ""
    company: str = ""
    inquiry_type: str = "general"
    subject: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ContactFormData":
        data = data if isinstance(data, dict) else {}
        return cls(
            name=_text(data, "name"),
            email=_text(data, "email"),
            phone=_text(data, "phone"),
            company=_text(data, "company"),
            inquiry_type=_text(data, "inquiryType", "inquiry_type", default="general"),
            subject=_text(data, "subject"),
            message=_text(data, "message"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name.strip(),
            "email": self.email.strip(),
            "inquiryType": self.inquiry_type,
            "subject": self.subject.strip(),
            "message": self.message.strip(),
        }
        if self.phone.strip():
            payload["phone"] = self.phone.strip()
        if self.company.strip():
            payload["company"] = self.company.strip()
        return payload
