"""
app/models/user.py

Purpose: User document model

- Identity, contact details and credential hashes
- Verification flag and PIN
- The outstanding OTP challenge, if any
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.time_utils import ensure_utc, utcnow


class OtpChallenge(BaseModel):
    """
    The outstanding {code, expires_at} pair attached to a user.
    """
    code: str
    expires_at: datetime

    @field_validator("expires_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    mobile: str
    email: str
    password_hash: str
    pin_hash: Optional[str] = None
    is_verified: bool = False
    referral_code: str = ""
    otp: Optional[OtpChallenge] = None
    reset_password_token: Optional[str] = None
    reset_password_expires: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v: Any) -> str:
        return str(v)

    @property
    def has_pin(self) -> bool:
        return bool(self.pin_hash)

    @classmethod
    def from_document(cls, document: Optional[Dict[str, Any]]) -> Optional["User"]:
        if document is None:
            return None
        return cls.model_validate(document)


def new_user_document(
    name: str,
    mobile: str,
    email: str,
    password_hash: str,
    referral_code: str = "",
) -> Dict[str, Any]:
    """
    Builds the document inserted on registration: unverified, no PIN, no OTP.
    """
    now = utcnow()
    return {
        "name": name,
        "mobile": mobile,
        "email": email,
        "password_hash": password_hash,
        "pin_hash": None,
        "is_verified": False,
        "referral_code": referral_code or "",
        "reset_password_token": None,
        "reset_password_expires": None,
        "created_at": now,
        "updated_at": now,
    }
