"""
app/services/user_service.py

Purpose: User account use cases

- Registration with mobile/email uniqueness
- Mobile verification by SMS OTP
- One-time PIN setup
- Password reset by email OTP
- Login with mobile and password
"""

from starlette.concurrency import run_in_threadpool

from app.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from app.core.logging import get_logger, LogContext
from app.core.security import create_access_token, hash_password, verify_password
from app.models.user import OtpChallenge, User, new_user_document
from app.schemas.user import RegisterRequest
from app.services.otp_service import OtpService
from utils.constants import (
    LOGIN_FAILED_MESSAGE,
    MOBILE_OTP_SMS_TEMPLATE,
    PIN_ALREADY_SET_MESSAGE,
    RESET_PASSWORD_EMAIL_SUBJECT,
    RESET_PASSWORD_EMAIL_TEMPLATE,
    USER_EXISTS_MESSAGE,
    USER_NOT_FOUND_MESSAGE,
)

logger = get_logger(__name__)


class UserService:
    """
    Account use cases over an injected store, OTP manager and notifiers.
    """

    def __init__(self, store, otp_service: OtpService, sms_service, email_service):
        self.store = store
        self.otp_service = otp_service
        self.sms_service = sms_service
        self.email_service = email_service

    async def register(self, payload: RegisterRequest) -> User:
        """
        Creates an unverified user.

        Raises:
            ConflictError: If the mobile or email is already registered
        """
        with LogContext(mobile=payload.mobile, email=payload.email):
            existing = await self.store.find_by_mobile_or_email(payload.mobile, payload.email)
            if existing:
                logger.info("Registration rejected, user exists")
                raise ConflictError(USER_EXISTS_MESSAGE)

            password_hash = await run_in_threadpool(hash_password, payload.password)
            user = await self.store.insert(
                new_user_document(
                    name=payload.name,
                    mobile=payload.mobile,
                    email=payload.email,
                    password_hash=password_hash,
                    referral_code=payload.referral_code or "",
                )
            )

            logger.info("User registered", extra={"user_id": user.id})
            return user

    async def _get_by_mobile(self, mobile: str) -> User:
        user = await self.store.find_by_mobile(mobile)
        if not user:
            logger.info("No user for mobile", extra={"mobile": mobile})
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        return user

    async def _get_by_email(self, email: str) -> User:
        user = await self.store.find_by_email(email)
        if not user:
            logger.info("No user for email", extra={"email": email})
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        return user

    async def send_mobile_otp(self, mobile: str) -> OtpChallenge:
        """
        Issues a challenge and sends it by SMS.

        Raises:
            NotFoundError: Unknown mobile
            DeliveryError: SMS provider failure (the challenge stays issued)
        """
        user = await self._get_by_mobile(mobile)
        challenge = await self.otp_service.issue(user)
        await self.sms_service.send_sms(
            user.mobile,
            MOBILE_OTP_SMS_TEMPLATE.format(otp=challenge.code),
        )
        return challenge

    async def verify_mobile_otp(self, mobile: str, otp: str) -> str:
        """
        Consumes the challenge, marks the user verified and returns a
        session token.

        Raises:
            NotFoundError: Unknown mobile
            OtpError: Challenge missing, wrong or expired
        """
        user = await self._get_by_mobile(mobile)
        await self.otp_service.verify(user, otp, updates={"is_verified": True})
        user.is_verified = True

        logger.info("Mobile verified", extra={"user_id": user.id})
        return create_access_token(user.id)

    async def set_pin(self, user_id: str, pin: str) -> None:
        """
        Stores the user's PIN (hashed). A PIN can be set only once.

        Raises:
            NotFoundError: The session's user no longer exists
            ConflictError: A PIN is already set
        """
        with LogContext(user_id=user_id):
            user = await self.store.find_by_id(user_id)
            if not user:
                raise NotFoundError(USER_NOT_FOUND_MESSAGE)

            if user.has_pin:
                logger.info("PIN setup rejected, already set")
                raise ConflictError(PIN_ALREADY_SET_MESSAGE)

            pin_hash = await run_in_threadpool(hash_password, pin)
            if not await self.store.set_pin_if_absent(user_id, pin_hash):
                logger.warning("PIN set concurrently")
                raise ConflictError(PIN_ALREADY_SET_MESSAGE)

            logger.info("PIN set")

    async def forgot_password(self, email: str) -> OtpChallenge:
        """
        Issues a challenge and sends it by email.

        Raises:
            NotFoundError: Unknown email
            DeliveryError: SMTP failure (the challenge stays issued)
        """
        user = await self._get_by_email(email)
        challenge = await self.otp_service.issue(user)
        await self.email_service.send_email(
            user.email,
            RESET_PASSWORD_EMAIL_SUBJECT,
            RESET_PASSWORD_EMAIL_TEMPLATE.format(otp=challenge.code),
        )
        return challenge

    async def reset_password(self, email: str, otp: str, password: str) -> None:
        """
        Consumes the challenge and replaces the password hash in one write.

        Raises:
            NotFoundError: Unknown email
            OtpError: Challenge missing, wrong or expired
        """
        user = await self._get_by_email(email)
        password_hash = await run_in_threadpool(hash_password, password)
        await self.otp_service.verify(user, otp, updates={"password_hash": password_hash})

        logger.info("Password reset", extra={"user_id": user.id})

    async def login(self, mobile: str, password: str) -> str:
        """
        Checks credentials and returns a session token. Verification status
        is not required.

        Raises:
            AuthenticationError: Unknown mobile or wrong password
        """
        user = await self.store.find_by_mobile(mobile)
        if not user:
            logger.info("Login failed, user not found", extra={"mobile": mobile})
            raise AuthenticationError(f"{LOGIN_FAILED_MESSAGE}. User not found.")

        if not await run_in_threadpool(verify_password, password, user.password_hash):
            logger.info("Login failed, wrong password", extra={"user_id": user.id})
            raise AuthenticationError(f"{LOGIN_FAILED_MESSAGE}. Wrong password.")

        logger.info("User logged in", extra={"user_id": user.id})
        return create_access_token(user.id)
