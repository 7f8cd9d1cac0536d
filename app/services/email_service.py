"""
app/services/email_service.py

Purpose: Email delivery via SMTP

- Implicit TLS when SMTP_SECURE, otherwise STARTTLS if the server offers it
- Runs the blocking SMTP session in a worker thread
- Failures surface as DeliveryError (no automatic retry)
"""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional

from app.core.config import settings
from app.core.exceptions import DeliveryError
from app.core.logging import get_logger

logger = get_logger(__name__)


class EmailService:
    """Service for sending transactional email over SMTP"""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        secure: Optional[bool] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        from_email: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.secure = settings.SMTP_SECURE if secure is None else secure
        self.username = username or settings.SMTP_USERNAME
        self.password = password or settings.SMTP_PASSWORD
        self.from_email = from_email or settings.SMTP_FROM_EMAIL
        self.timeout = timeout or settings.NOTIFICATION_TIMEOUT_SECONDS

    def _connect(self) -> smtplib.SMTP:
        if self.secure:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        return smtplib.SMTP(self.host, self.port, timeout=self.timeout)

    def _deliver(self, message: EmailMessage) -> None:
        with self._connect() as smtp:
            if not self.secure:
                smtp.ehlo()
                if smtp.has_extn("starttls"):
                    smtp.starttls()
                    smtp.ehlo()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(message)

    async def send_email(self, to_email: str, subject: str, body: str) -> None:
        """
        Sends a plain-text email.

        Raises:
            DeliveryError: If the SMTP exchange fails or times out
        """
        message = EmailMessage()
        message["From"] = self.from_email
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content(body)

        logger.info(f"Sending email to {to_email}", extra={"email": to_email})

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP delivery failed: {e}", extra={"email": to_email})
            raise DeliveryError(f"Email provider error: {e}") from e

        logger.info("Email sent", extra={"email": to_email})


# Singleton instance
email_service = EmailService()
