from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from ..models.order import INQUIRY_TYPES, ContactFormData
from ..utils.validators import is_blank, is_valid_email
from .logging import log_event


GENERIC_CONTACT_ERROR = "Sorry, there was an error sending your message. Please try again."


def validate_contact(form: ContactFormData) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if is_blank(form.name):
        errors["name"] = "Name is required"
    if is_blank(form.email):
        errors["email"] = "Email is required"
    elif not is_valid_email(form.email):
        errors["email"] = "Please enter a valid email address"
    if form.inquiry_type not in INQUIRY_TYPES:
        errors["inquiryType"] = "Please choose an inquiry type"
    if is_blank(form.subject):
        errors["subject"] = "Subject is required"
    if is_blank(form.message):
        errors["message"] = "Message is required"
    return errors


class ContactService:
    """Posts contact/consultation requests to the contact endpoint."""

    def __init__(self, endpoint_url: str, *, http: Optional[requests.Session] = None, timeout: float = 10) -> None:
        self._endpoint_url = endpoint_url
        self._http = http or requests.Session()
        self._timeout = timeout

    def submit(self, form: ContactFormData) -> Dict[str, Any]:
        errors = validate_contact(form)
        if errors:
            return {"status": "invalid", "errors": errors}
        try:
            response = self._http.post(self._endpoint_url, json=form.to_dict(), timeout=self._timeout)
        except requests.exceptions.RequestException as exc:
            log_event("error", "contact.failed", reason=f"{type(exc).__name__}: {exc}")
            return {"status": "error", "message": GENERIC_CONTACT_ERROR}
        if not 200 <= response.status_code < 300:
            log_event("error", "contact.failed", reason=f"HTTP {response.status_code}")
            return {"status": "error", "message": GENERIC_CONTACT_ERROR}
        log_event("info", "contact.submitted", inquiry_type=form.inquiry_type)
        return {"status": "ok"}
