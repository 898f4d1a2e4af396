"""
Email sender.

Sends plain-text mail over SMTP. Configuration is passed in explicitly as a
MailConfig; nothing here reads module-level settings at send time.
"""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol

from teamtodo.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailConfig:
    """SMTP connection and sender settings."""

    host: str
    port: int
    sender: str
    timeout: float = 10.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "MailConfig":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.email_from,
            timeout=settings.smtp_timeout,
        )


class Mailer(Protocol):
    """Mail collaborator: True when the message was handed to the server."""

    async def send(self, to: str, subject: str, body: str) -> bool: ...


class SmtpMailer:
    """Mailer backed by smtplib, run off the event loop."""

    def __init__(self, config: MailConfig):
        self.config = config

    def _build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.config.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    def _send_sync(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout) as smtp:
            smtp.send_message(message)

    async def send(self, to: str, subject: str, body: str) -> bool:
        """
        Send one email.

        Returns:
            True on success, False if the SMTP server is unreachable or
            rejects the message.
        """
        message = self._build_message(to, subject, body)
        try:
            await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("Failed to send email", extra={"recipient": to, "error": str(e)})
            return False
        logger.info("Email sent", extra={"recipient": to})
        return True
