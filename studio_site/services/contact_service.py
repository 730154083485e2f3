# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
from pathlib import Path
from typing import Any, Dict, List
from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape
from pydantic import ValidationError
from studio_site.core.errors import ContactValidationError, DeliveryError
from studio_site.core.models import ContactSubmission, DeliveryReceipt

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

FIELD_MESSAGES = {
    "name": "Name is required and must fit on one line",
    "email": "A valid email is required",
    "eventCategory": "Event category must fit on one line",
    "message": "Message is required",
    "eventDateStart": "A valid start date is required",
    "eventDateEnd": "A valid end date on or after the start date is required",
}


def _nl2br(value) -> Markup:
    return escape(value).replace("\n", Markup("<br>\n"))


class ContactService:
    """
    Validates a contact form submission and relays it as an email.
    """

    def __init__(self, mailer, studio_name: str = "The Wedding Shade"):
        self.mailer = mailer
        self.studio_name = studio_name
        self.logger = logging.getLogger(__name__)
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["nl2br"] = _nl2br

    def validate(self, payload: Any) -> ContactSubmission:
        if not isinstance(payload, dict):
            raise ContactValidationError(
                [{"field": "body", "message": "Request body must be a JSON object"}]
            )
        try:
            return ContactSubmission.model_validate(payload)
        except ValidationError as e:
            raise ContactValidationError(self._field_errors(e)) from e

    @staticmethod
    def _field_errors(error: ValidationError) -> List[Dict[str, str]]:
        errors = []
        seen = set()
        for err in error.errors():
            field = str(err["loc"][0]) if err["loc"] else "body"
            if field in seen:
                continue
            seen.add(field)
            errors.append({"field": field, "message": FIELD_MESSAGES.get(field, err["msg"])})
        return errors

    def subject_for(self, submission: ContactSubmission) -> str:
        subject = f"New Inquiry from {submission.name}"
        if submission.event_category:
            subject += f" - {submission.event_category}"
        return subject

    def render(self, submission: ContactSubmission):
        context = {"s": submission, "studio_name": self.studio_name}
        text = self.env.get_template("email/contact.txt").render(**context).strip()
        html = self.env.get_template("email/contact.html").render(**context).strip()
        return text, html

    def relay(self, payload: Any) -> DeliveryReceipt:
        submission = self.validate(payload)
        self.logger.info(f"New contact form submission from {submission.email}")

        text, html = self.render(submission)
        try:
            message_id = self.mailer.send(
                subject=self.subject_for(submission),
                text=text,
                html=html,
                reply_to=str(submission.email),
            )
        except OSError as e:
            raise DeliveryError(f"Mail transport failed: {e}") from e

        return DeliveryReceipt(message_id=message_id)
