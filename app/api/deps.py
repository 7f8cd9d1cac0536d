"""
app/api/deps.py

Purpose: FastAPI dependencies

- Store, notifiers and use-case services (overridable in tests)
- Current user id from the session cookie or a bearer token
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from app.core.config import settings
from app.core.exceptions import AuthenticationError
from app.core.security import decode_access_token
from app.db.mongo import get_users_collection
from app.db.user_store import UserStore
from app.services.email_service import EmailService, email_service
from app.services.otp_service import OtpService
from app.services.sms_service import SmsService, sms_service
from app.services.user_service import UserService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/login", auto_error=False)


def get_user_store() -> UserStore:
    return UserStore(get_users_collection())


def get_sms_service() -> SmsService:
    return sms_service


def get_email_service() -> EmailService:
    return email_service


def get_otp_service(store=Depends(get_user_store)) -> OtpService:
    return OtpService(store)


def get_user_service(
    store=Depends(get_user_store),
    otp_service: OtpService = Depends(get_otp_service),
    sms=Depends(get_sms_service),
    email=Depends(get_email_service),
) -> UserService:
    return UserService(store, otp_service, sms, email)


async def get_current_user_id(
    request: Request,
    bearer_token: Optional[str] = Depends(oauth2_scheme),
) -> str:
    """
    Resolves the authenticated user id.

    Raises:
        AuthenticationError: No token, or the token is invalid or expired
    """
    token = bearer_token or request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise AuthenticationError("Not authenticated")
    return decode_access_token(token)
