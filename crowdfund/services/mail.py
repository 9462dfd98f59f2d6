"""Outgoing email.

Two backends: ``smtp`` delivers through an SMTP relay, ``log`` writes the
message to the application log (development only). Both expose
``async send(to, subject, body)``.
"""
import asyncio
import smtplib
from email.message import EmailMessage
from typing import Protocol

import structlog
from starlette.concurrency import run_in_threadpool

from ..config import MailSettings
from ..core.exceptions import MailDeliveryError

logger = structlog.get_logger(__name__)


class Mailer(Protocol):
    async def send(self, to: str, subject: str, body: str) -> None:
        ...


class LogMailer:
    """Writes messages to the log instead of sending them."""

    async def send(self, to: str, subject: str, body: str) -> None:
        logger.info("Email not sent (log backend)", to=to, subject=subject, body=body)


class SMTPMailer:
    """Plain-text SMTP delivery run in the threadpool."""

    def __init__(self, settings: MailSettings):
        self.settings = settings

    def _build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.settings.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(
            self.settings.host,
            self.settings.port,
            timeout=self.settings.timeout_seconds,
        ) as server:
            if self.settings.use_tls:
                server.starttls()
            if self.settings.username and self.settings.password:
                server.login(self.settings.username, self.settings.password)
            server.send_message(message)

    async def send(self, to: str, subject: str, body: str) -> None:
        message = self._build_message(to, subject, body)
        try:
            await asyncio.wait_for(
                run_in_threadpool(self._deliver, message),
                timeout=self.settings.timeout_seconds,
            )
        except (smtplib.SMTPException, OSError, asyncio.TimeoutError) as e:
            logger.error("Email delivery failed", to=to, subject=subject, error=str(e))
            raise MailDeliveryError() from e

        logger.info("Email sent", to=to, subject=subject)


def build_mailer(settings: MailSettings) -> Mailer:
    """Pick the mail backend from configuration."""
    if settings.backend == "smtp":
        if not settings.host:
            raise ValueError("MAIL_HOST is required for the smtp mail backend")
        return SMTPMailer(settings)
    if settings.backend == "log":
        return LogMailer()
    raise ValueError(f"Unknown mail backend: {settings.backend}")
