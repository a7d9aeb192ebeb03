import asyncio
import smtplib

import pytest

from portal.core.config import AppSettings
from portal.core.errors import TransportError
from portal.schemas.contact import ContactForm
from portal.services import mailer as mailer_module
from portal.services.contact import compose_contact_mail
from portal.services.mailer import ConsoleMailer, SmtpMailer, build_mailer


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.calls: list[str] = []
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(f"login:{user}")

    def send_message(self, message):
        self.messages.append(message)


@pytest.fixture()
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def make_mailer(**overrides) -> SmtpMailer:
    options = dict(
        host="smtp.example.com",
        port=587,
        sender="noreply@example.com",
        username="noreply@example.com",
        password="app-password",
    )
    options.update(overrides)
    return SmtpMailer(**options)


def test_smtp_mailer_sends_plain_text(fake_smtp):
    asyncio.run(make_mailer().send("owner@example.com", "Contact: A", "Name: A"))

    (smtp,) = fake_smtp.instances
    assert (smtp.host, smtp.port, smtp.timeout) == ("smtp.example.com", 587, 10.0)
    assert smtp.calls == ["starttls", "login:noreply@example.com"]
    (message,) = smtp.messages
    assert message["To"] == "owner@example.com"
    assert message["From"] == "noreply@example.com"
    assert message["Subject"] == "Contact: A"
    assert message.get_content().strip() == "Name: A"


def test_smtp_mailer_skips_login_without_credentials(fake_smtp):
    asyncio.run(make_mailer(username="", password="", starttls=False).send("o@example.com", "s", "b"))
    assert fake_smtp.instances[0].calls == []


def test_smtp_failures_become_transport_errors(monkeypatch):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(mailer_module.smtplib, "SMTP", refuse)
    with pytest.raises(TransportError):
        asyncio.run(make_mailer().send("owner@example.com", "s", "b"))


def test_smtp_auth_failure_becomes_transport_error(monkeypatch, fake_smtp):
    def reject(self, user, password):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    monkeypatch.setattr(FakeSMTP, "login", reject)
    with pytest.raises(TransportError):
        asyncio.run(make_mailer().send("owner@example.com", "s", "b"))


def test_missing_recipient_is_a_transport_error(fake_smtp):
    with pytest.raises(TransportError):
        asyncio.run(make_mailer().send("", "s", "b"))
    assert fake_smtp.instances == []


def test_build_mailer_picks_backend(tmp_path):
    console = build_mailer(AppSettings(DATA_DIR=tmp_path, MAIL_BACKEND="console"))
    smtp = build_mailer(AppSettings(DATA_DIR=tmp_path, SMTP_USERNAME="me@example.com"))
    assert isinstance(console, ConsoleMailer)
    assert isinstance(smtp, SmtpMailer)
    assert smtp.sender == "me@example.com"
    assert (smtp.host, smtp.port, smtp.starttls) == ("smtp.gmail.com", 587, True)


def test_compose_contact_mail():
    subject, body = compose_contact_mail(ContactForm(name="A", email="a@x.com", message="hi\nthere"))
    assert subject == "Contact: A"
    assert body == "Name: A\nEmail: a@x.com\nMessage:\nhi\nthere"
