from __future__ import annotations

from unittest.mock import MagicMock

import requests

from storefront.common.models.order import ContactFormData
from storefront.common.services.contact_service import GENERIC_CONTACT_ERROR, ContactService, validate_contact

from conftest import make_response


def _form(**overrides) -> ContactFormData:
    data = {
        "name": "Bilal",
        "email": "bilal@example.com",
        "company": "  ",
        "inquiryType": "distributor",
        "subject": "Dealership",
        "message": " We would like to stock your wire. ",
    }
    data.update(overrides)
    return ContactFormData.from_dict(data)


def test_valid_form_has_no_errors() -> None:
    assert validate_contact(_form()) == {}


def test_each_field_is_checked() -> None:
    errors = validate_contact(_form(name=" ", email="", inquiryType="spam", subject="", message=""))
    assert errors == {
        "name": "Name is required",
        "email": "Email is required",
        "inquiryType": "Please choose an inquiry type",
        "subject": "Subject is required",
        "message": "Message is required",
    }
    assert validate_contact(_form(email="bilal@"))["email"] == "Please enter a valid email address"


def test_submit_posts_trimmed_payload() -> None:
    http = MagicMock()
    http.post.return_value = make_response(201, {})
    result = ContactService("https://x/contact", http=http, timeout=4).submit(_form())
    assert result == {"status": "ok"}
    kwargs = http.post.call_args.kwargs
    assert kwargs["json"] == {
        "name": "Bilal",
        "email": "bilal@example.com",
        "inquiryType": "distributor",
        "subject": "Dealership",
        "message": "We would like to stock your wire.",
    }
    assert kwargs["timeout"] == 4


def test_invalid_form_is_not_sent() -> None:
    http = MagicMock()
    assert ContactService("https://x/contact", http=http).submit(_form(message=""))["status"] == "invalid"
    http.post.assert_not_called()


def test_failures_return_generic_message() -> None:
    http = MagicMock()
    http.post.return_value = make_response(400, {"error": "bad"})
    service = ContactService("https://x/contact", http=http)
    assert service.submit(_form()) == {"status": "error", "message": GENERIC_CONTACT_ERROR}

    http.post.side_effect = requests.exceptions.ConnectionError("refused")
    assert service.submit(_form())["message"] == GENERIC_CONTACT_ERROR
