# Copyright (c) 2025 Trae AI. All rights reserved.

import pytest
from unittest.mock import MagicMock
from studio_site.core.errors import ContactValidationError, DeliveryError
from studio_site.services.contact_service import ContactService


def _payload(**overrides):
    payload = {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "+1 555 0100",
        "location": "Lake Como",
        "eventCategory": "Wedding",
        "eventType": "Full day",
        "eventDateStart": "2026-06-01",
        "eventDateEnd": "2026-06-02",
        "message": "Hello there\nWe love <b>your</b> work",
    }
    payload.update(overrides)
    return {k: v for k, v in payload.items() if v is not None}


@pytest.fixture
def service():
    mailer = MagicMock()
    mailer.send.return_value = "<id@theweddingshade.com>"
    return ContactService(mailer)


def _fields(exc_info):
    return [e["field"] for e in exc_info.value.errors]


def test_missing_email_is_rejected_without_sending(service):
    payload = _payload()
    del payload["email"]

    with pytest.raises(ContactValidationError) as exc_info:
        service.relay(payload)

    assert _fields(exc_info) == ["email"]
    assert exc_info.value.errors[0]["message"] == "A valid email is required"
    service.mailer.send.assert_not_called()


def test_malformed_email_is_rejected(service):
    with pytest.raises(ContactValidationError) as exc_info:
        service.validate(_payload(email="not-an-email"))
    assert _fields(exc_info) == ["email"]


def test_blank_required_fields_are_rejected(service):
    with pytest.raises(ContactValidationError) as exc_info:
        service.validate(_payload(name="   ", message=""))
    assert sorted(_fields(exc_info)) == ["message", "name"]


def test_optional_fields_may_be_omitted(service):
    submission = service.validate({"name": "Sam", "email": "sam@example.com", "message": "Hi"})

    assert submission.phone is None
    assert submission.event_date_start is None


def test_blank_optional_fields_become_none(service):
    submission = service.validate(_payload(phone="", eventDateEnd=""))

    assert submission.phone is None
    assert submission.event_date_end is None


def test_invalid_date_is_rejected(service):
    with pytest.raises(ContactValidationError) as exc_info:
        service.validate(_payload(eventDateStart="next tuesday"))
    assert _fields(exc_info) == ["eventDateStart"]


def test_end_date_before_start_is_rejected(service):
    with pytest.raises(ContactValidationError) as exc_info:
        service.validate(_payload(eventDateStart="2026-06-05", eventDateEnd="2026-06-01"))
    assert _fields(exc_info) == ["eventDateEnd"]


def test_non_object_body_is_rejected(service):
    with pytest.raises(ContactValidationError) as exc_info:
        service.validate(["not", "a", "dict"])
    assert _fields(exc_info) == ["body"]


def test_relay_sends_exactly_once(service):
    receipt = service.relay(_payload())

    assert receipt.message_id == "<id@theweddingshade.com>"
    service.mailer.send.assert_called_once()
    kwargs = service.mailer.send.call_args.kwargs
    assert kwargs["subject"] == "New Inquiry from Jane Doe - Wedding"
    assert kwargs["reply_to"] == "jane@example.com"


def test_subject_without_category(service):
    submission = service.validate(_payload(eventCategory=None))
    assert service.subject_for(submission) == "New Inquiry from Jane Doe"


def test_render_escapes_html_and_keeps_text(service):
    text, html = service.render(service.validate(_payload()))

    assert "- Name: Jane Doe" in text
    assert "We love <b>your</b> work" in text
    assert "&lt;b&gt;your&lt;/b&gt;" in html
    assert "Hello there<br>" in html
    assert "mailto:jane@example.com" in html
    assert "2026-06-02" in html


def test_transport_failure_becomes_delivery_error(service):
    service.mailer.send.side_effect = ConnectionResetError("reset by peer")

    with pytest.raises(DeliveryError):
        service.relay(_payload())


@pytest.mark.parametrize("field, value", [
    ("name", "Jane\nBcc: victim@example.com"),
    ("name", "Jane\rDoe"),
    ("eventCategory", "Wedding\nBcc: victim@example.com"),
])
def test_line_breaks_in_subject_fields_are_rejected(service, field, value):
    with pytest.raises(ContactValidationError) as exc_info:
        service.relay(_payload(**{field: value}))

    assert _fields(exc_info) == [field]
    service.mailer.send.assert_not_called()


def test_unexpected_mailer_error_is_not_reported_as_delivery_failure(service):
    service.mailer.send.side_effect = ValueError("bad header")

    with pytest.raises(ValueError):
        service.relay(_payload())


def test_delivery_error_propagates(service):
    service.mailer.send.side_effect = DeliveryError("rejected")

    with pytest.raises(DeliveryError, match="rejected"):
        service.relay(_payload())
