"""
app/services/sms_service.py

Purpose: SMS delivery via Twilio

- Sends plain SMS through the Twilio Messages REST API
- Bounded request timeout
- Any provider failure surfaces as DeliveryError (no automatic retry)
"""

import httpx
from typing import Optional
from app.core.config import settings
from app.core.exceptions import DeliveryError
from app.core.logging import get_logger

logger = get_logger(__name__)


class SmsService:
    """Service for sending SMS via Twilio"""

    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        from_number: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.account_sid = account_sid or settings.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token or settings.TWILIO_AUTH_TOKEN
        self.from_number = from_number or settings.TWILIO_PHONE_NUMBER
        self.timeout = timeout or settings.NOTIFICATION_TIMEOUT_SECONDS
        self.base_url = f"{settings.TWILIO_BASE_URL}/Accounts/{self.account_sid}"
        self._transport = transport

    async def send_sms(self, to_phone: str, message: str) -> str:
        """
        Sends an SMS via Twilio.

        Args:
            to_phone: Recipient phone number
            message: Message text

        Returns:
            Twilio message SID

        Raises:
            DeliveryError: If Twilio is not configured, times out or rejects the message
        """
        if not self.is_configured():
            logger.error("Twilio is not configured, cannot send SMS")
            raise DeliveryError("SMS provider is not configured")

        url = f"{self.base_url}/Messages.json"
        data = {
            "From": self.from_number,
            "To": to_phone,
            "Body": message
        }

        logger.info(f"Sending SMS to {to_phone}")

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    url,
                    data=data,
                    auth=(self.account_sid, self.auth_token),
                    timeout=self.timeout
                )
        except httpx.TimeoutException as e:
            logger.error("Twilio API timeout")
            raise DeliveryError("SMS provider timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Error sending SMS: {e}", exc_info=True)
            raise DeliveryError(f"SMS provider unreachable: {e}") from e

        if response.status_code not in (200, 201):
            logger.error(f"Twilio API error: {response.status_code} - {response.text}")
            raise DeliveryError(
                f"SMS provider error: {response.status_code}",
                details={"provider_status": response.status_code}
            )

        sid = response.json().get("sid")
        logger.info(f"SMS sent: SID={sid}")
        return sid

    def is_configured(self) -> bool:
        """Check if Twilio is properly configured"""
        return bool(
            self.account_sid
            and self.auth_token
            and self.from_number
        )


# Singleton instance
sms_service = SmsService()
