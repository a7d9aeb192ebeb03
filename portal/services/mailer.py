from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from starlette.concurrency import run_in_threadpool

from ..core.config import AppSettings
from ..core.errors import TransportError

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    async def send(self, to: str, subject: str, body: str) -> None:
        """Deliver one plain-text message or raise ``TransportError``."""


class SmtpMailer:
    """Sends mail through an SMTP relay (Gmail by default)."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        starttls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.starttls = starttls
        self.timeout = timeout

    def build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.starttls:
                smtp.starttls()
            if self.username and self.password:
                smtp.login(self.username, self.password)
            smtp.send_message(message)

    async def send(self, to: str, subject: str, body: str) -> None:
        if not to:
            raise TransportError("no recipient configured")
        message = self.build_message(to, subject, body)
        # smtplib blocks; keep the event loop free while the relay answers
        try:
            await run_in_threadpool(self._deliver, message)
        except (smtplib.SMTPException, OSError) as exc:
            raise TransportError(f"SMTP delivery to {self.host}:{self.port} failed: {exc}") from exc
        logger.info("Mail sent to %s via %s:%s", to, self.host, self.port)


class ConsoleMailer:
    """Development backend: writes the message to the log instead of sending it."""

    async def send(self, to: str, subject: str, body: str) -> None:
        logger.info("Mail to %s | %s\n%s", to, subject, body)


def build_mailer(settings: AppSettings) -> Mailer:
    if settings.MAIL_BACKEND == "console":
        return ConsoleMailer()
    return SmtpMailer(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        sender=settings.mail_sender,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        starttls=settings.SMTP_STARTTLS,
        timeout=settings.SMTP_TIMEOUT,
    )
