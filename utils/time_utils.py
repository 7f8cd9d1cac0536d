"""
utils/time_utils.py

Purpose: Time and expiry helpers

- Timezone-aware "now"
- OTP expiry checks
- Timestamp utilities
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """
    Current time as a timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Attaches UTC to naive datetimes read back from MongoDB.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def calculate_otp_expiry(issued_at: datetime, validity_minutes: int = 10) -> datetime:
    """
    Calculates OTP expiry timestamp.
    """
    return issued_at + timedelta(minutes=validity_minutes)


def is_otp_expired(expires_at: datetime, now: Optional[datetime] = None) -> bool:
    """
    An OTP is expired from the instant ``expires_at`` is reached.
    """
    now = now or utcnow()
    return ensure_utc(now) >= ensure_utc(expires_at)

