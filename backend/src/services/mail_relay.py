"""
SMTP mail relay.

Sends plain-text mail through an SMTP server (Gmail by default) using
STARTTLS and username/password login. smtplib blocks, so each send runs in
a worker thread.
"""

import asyncio
import smtplib
import structlog
from email.mime.text import MIMEText
from typing import Optional

from backend.src.config import Settings
from backend.src.errors import MailError

logger = structlog.get_logger(__name__)


class SmtpMailRelay:
    """Mail relay over SMTP."""

    def __init__(
        self,
        host: str,
        port: int,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        use_starttls: bool = True,
        timeout: float = 30.0
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.use_starttls = use_starttls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpMailRelay":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            sender=settings.mail_sender,
            use_starttls=settings.smtp_use_starttls,
            timeout=settings.smtp_timeout
        )

    def build_message(self, to: str, subject: str, body: str) -> MIMEText:
        message = MIMEText(body, "plain")
        message["From"] = self.sender or ""
        message["To"] = to
        message["Subject"] = subject
        return message

    async def send_mail(self, to: str, subject: str, body: str) -> None:
        """
        Send a plain-text email.

        Args:
            to: Recipient address
            subject: Subject line
            body: Message body

        Raises:
            MailError: If the relay refuses or the connection fails
        """
        message = self.build_message(to, subject, body)

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("mail_send_failed", to=to, error=str(e))
            raise MailError() from e

        logger.info("mail_sent", to=to, subject=subject)

    def _deliver(self, message: MIMEText) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_starttls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(message)
