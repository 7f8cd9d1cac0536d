"""
app/api/users.py

Purpose: User account routes

- Shapes and validates input (pydantic)
- Delegates to UserService
- Maps results to status codes and the session cookie
- No business logic should be written here
"""

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_current_user_id, get_user_service
from app.core.config import settings
from app.schemas.user import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    SendOtpRequest,
    SetPinRequest,
    TokenResponse,
    VerifyOtpRequest,
)
from app.services.user_service import UserService
from utils.constants import (
    LOGGED_IN_MESSAGE,
    OTP_SENT_MESSAGE,
    OTP_VERIFIED_MESSAGE,
    PASSWORD_RESET_MESSAGE,
    PIN_SET_MESSAGE,
    USER_REGISTERED_MESSAGE,
)

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    service: UserService = Depends(get_user_service),
):
    user = await service.register(payload)
    return RegisterResponse(msg=USER_REGISTERED_MESSAGE, id=user.id)


@router.post("/send-otp", response_model=MessageResponse)
async def send_otp(
    payload: SendOtpRequest,
    service: UserService = Depends(get_user_service),
):
    await service.send_mobile_otp(payload.mobile)
    return MessageResponse(msg=OTP_SENT_MESSAGE)


@router.post("/verify-otp", response_model=MessageResponse)
async def verify_otp(
    payload: VerifyOtpRequest,
    response: Response,
    service: UserService = Depends(get_user_service),
):
    """
    Verifies the mobile OTP and sets the session cookie (http-only, 1 hour).
    """
    token = await service.verify_mobile_otp(payload.mobile, payload.otp)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return MessageResponse(msg=OTP_VERIFIED_MESSAGE)


@router.post("/set-pin", response_model=MessageResponse)
async def set_pin(
    payload: SetPinRequest,
    user_id: str = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
):
    await service.set_pin(user_id, payload.pin)
    return MessageResponse(msg=PIN_SET_MESSAGE)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    payload: ForgotPasswordRequest,
    service: UserService = Depends(get_user_service),
):
    await service.forgot_password(payload.email)
    return MessageResponse(msg=OTP_SENT_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    service: UserService = Depends(get_user_service),
):
    await service.reset_password(payload.email, payload.otp, payload.password)
    return MessageResponse(msg=PASSWORD_RESET_MESSAGE)


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    service: UserService = Depends(get_user_service),
):
    token = await service.login(payload.mobile, payload.password)
    return TokenResponse(msg=LOGGED_IN_MESSAGE, access_token=token)
