"""
utils/validation_utils.py

Purpose: Input validation

- Mobile number format
- PIN format
- Input sanitization
"""

import re
from typing import Optional

from utils.constants import MOBILE_PATTERN, PIN_PATTERN


def sanitize_input(text: Optional[str]) -> str:
    """
    Strips surrounding whitespace and collapses internal runs of spaces.

    Args:
        text: Raw input

    Returns:
        Cleaned string ("" for None)
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text.strip())


def validate_mobile(mobile: str) -> bool:
    """
    Validates a mobile number: 10 digits with an optional country code.

    Examples: 9991112222, +91 9991112222, +1-9991112222
    """
    if not mobile:
        return False
    return re.fullmatch(MOBILE_PATTERN, mobile.strip()) is not None


def validate_pin(pin: str) -> bool:
    """
    Validates a 4-digit numeric PIN.
    """
    if not pin:
        return False
    return re.fullmatch(PIN_PATTERN, pin) is not None

