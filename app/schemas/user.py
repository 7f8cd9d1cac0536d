"""
app/schemas/user.py

Purpose: Request and response bodies for the user routes
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator

from utils.constants import MIN_PASSWORD_LENGTH
from utils.validation_utils import sanitize_input, validate_mobile, validate_pin


def _mobile(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Mobile number is required")
    if not validate_mobile(v):
        raise ValueError(f"{v} is not a valid phone number")
    return v


def _required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Field is required")
    return v


class RegisterRequest(BaseModel):
    name: str
    mobile: str
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    referral_code: Optional[str] = Field(
        default="",
        validation_alias=AliasChoices("referral_code", "referralCode"),
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = sanitize_input(v)
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, v: str) -> str:
        return _mobile(v)


class SendOtpRequest(BaseModel):
    mobile: str

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, v: str) -> str:
        return _mobile(v)


class VerifyOtpRequest(BaseModel):
    mobile: str
    otp: str

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, v: str) -> str:
        return _mobile(v)

    @field_validator("otp")
    @classmethod
    def validate_otp(cls, v: str) -> str:
        return _required(v)


class SetPinRequest(BaseModel):
    pin: str = Field(..., description="4-digit numeric PIN")

    @field_validator("pin")
    @classmethod
    def check_pin(cls, v: str) -> str:
        if not validate_pin(v):
            raise ValueError("PIN must be a 4-digit number")
        return v


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)

    @field_validator("otp")
    @classmethod
    def validate_otp(cls, v: str) -> str:
        return _required(v)


class LoginRequest(BaseModel):
    mobile: str
    password: str

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, v: str) -> str:
        return _mobile(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password cannot be empty")
        return v


class MessageResponse(BaseModel):
    msg: str


class RegisterResponse(MessageResponse):
    id: str


class TokenResponse(MessageResponse):
    access_token: str
    token_type: str = "bearer"
