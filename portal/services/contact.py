from __future__ import annotations

from ..schemas.contact import ContactForm
from .mailer import Mailer

SESSION_FORM_KEY = "contact_form"


def compose_contact_mail(form: ContactForm) -> tuple[str, str]:
    subject = f"Contact: {form.name}"
    body = f"Name: {form.name}\nEmail: {form.email}\nMessage:\n{form.message}"
    return subject, body


async def send_contact_mail(mailer: Mailer, recipient: str, form: ContactForm) -> None:
    """One call, one email; resubmitting sends again."""

    subject, body = compose_contact_mail(form)
    await mailer.send(recipient, subject, body)
