"""
app/services/otp_service.py

Purpose: OTP lifecycle

- Generates 6-digit one-time codes
- Attaches a single outstanding challenge to a user (new issue replaces old)
- Adjudicates a claimed code: not found, mismatch, expired, or consumed
- Consumption is a conditional write, so a code is usable at most once
"""

import hmac
import secrets
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from app.core.config import settings
from app.core.exceptions import NotFoundError, OtpError
from app.core.logging import get_logger, LogContext
from app.models.user import OtpChallenge, User
from utils.time_utils import calculate_otp_expiry, is_otp_expired, utcnow

logger = get_logger(__name__)


def generate_otp_code() -> str:
    """
    Uniform 6-digit code in [100000, 999999] from the OS CSPRNG.
    """
    return str(100000 + secrets.randbelow(900000))


class OtpService:
    """
    Issues and verifies OTP challenges against the user store.

    Args:
        store: Credential store (``UserStore`` or a compatible fake)
        clock: Returns the current UTC time
        expiry_minutes: Challenge lifetime, defaults to OTP_EXPIRY_MINUTES
        code_generator: Produces the plaintext code
    """

    def __init__(
        self,
        store,
        clock: Callable[[], datetime] = utcnow,
        expiry_minutes: Optional[int] = None,
        code_generator: Callable[[], str] = generate_otp_code,
    ):
        self.store = store
        self.clock = clock
        self.expiry_minutes = expiry_minutes or settings.OTP_EXPIRY_MINUTES
        self.code_generator = code_generator

    async def issue(self, user: User) -> OtpChallenge:
        """
        Creates a fresh challenge for ``user`` and persists it, silently
        invalidating any earlier one. Delivery is left to the caller.

        Returns:
            The challenge including the plaintext code
        """
        with LogContext(user_id=user.id):
            challenge = OtpChallenge(
                code=self.code_generator(),
                expires_at=calculate_otp_expiry(self.clock(), self.expiry_minutes),
            )

            if not await self.store.set_otp(user.id, challenge):
                logger.warning("OTP issue for missing user")
                raise NotFoundError()

            user.otp = challenge
            logger.info(f"OTP issued, expires at {challenge.expires_at.isoformat()}")
            return challenge

    async def verify(
        self,
        user: User,
        claimed_code: str,
        updates: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Consumes the user's challenge if ``claimed_code`` matches and is
        still valid, applying ``updates`` to the user in the same write.

        Raises:
            OtpError: NOT_FOUND, MISMATCH or EXPIRED
        """
        with LogContext(user_id=user.id):
            challenge = user.otp
            if challenge is None:
                logger.info("OTP verification without pending challenge")
                raise OtpError(OtpError.NOT_FOUND)

            if not hmac.compare_digest(challenge.code.encode(), claimed_code.encode()):
                logger.info("OTP mismatch")
                raise OtpError(OtpError.MISMATCH)

            now = self.clock()
            if is_otp_expired(challenge.expires_at, now):
                logger.info("OTP expired")
                raise OtpError(OtpError.EXPIRED)

            # Lost a race with another consume or a reissue
            if not await self.store.consume_otp(user.id, claimed_code, now, updates):
                logger.warning("OTP challenge changed before it could be consumed")
                raise OtpError(OtpError.NOT_FOUND)

            user.otp = None
            logger.info("OTP consumed")
