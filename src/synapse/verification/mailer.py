from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Protocol

logger = logging.getLogger("synapse.verification")


class Mailer(Protocol):
    def send(self, *, to: str, subject: str, text: str, html: str) -> None: ...


@dataclass(frozen=True)
class SMTPSettings:
    host: str
    port: int = 587
    user: Optional[str] = None
    password: Optional[str] = None
    from_email: Optional[str] = None


class SMTPMailer:
    """
    Sends mail through an SMTP relay.

    Port 465 uses implicit TLS; other ports upgrade with STARTTLS.
    """

    def __init__(self, settings: SMTPSettings, *, timeout: float = 30.0) -> None:
        self.settings = settings
        self.timeout = timeout

    def send(self, *, to: str, subject: str, text: str, html: str) -> None:
        s = self.settings
        message = EmailMessage()
        message["From"] = s.from_email or s.user or ""
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)
        message.add_alternative(html, subtype="html")

        if s.port == 465:
            smtp = smtplib.SMTP_SSL(s.host, s.port, timeout=self.timeout)
        else:
            smtp = smtplib.SMTP(s.host, s.port, timeout=self.timeout)

        with smtp:
            if s.port != 465:
                smtp.starttls()
            if s.user and s.password:
                smtp.login(s.user, s.password)
            smtp.send_message(message)

        logger.info("Verification email sent to %s", to)


class ConsoleMailer:
    """
    Development mailer: writes the message to the log instead of sending it.
    """

    def send(self, *, to: str, subject: str, text: str, html: str) -> None:
        logger.warning("[DEV MODE] email to %s | %s | %s", to, subject, text)
