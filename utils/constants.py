"""
utils/constants.py

Purpose: Centralized static content

- User-facing response messages
- SMS and email templates for OTP delivery
- Field format patterns

(Prevents hardcoding across the codebase)
"""

# ============================================================
# FORMATS
# ============================================================

MOBILE_PATTERN = r"^(\+\d{1,3}[- ]?)?\d{10}$"
PIN_PATTERN = r"^[0-9]{4}$"
MIN_PASSWORD_LENGTH = 6

# ============================================================
# OTP DELIVERY
# ============================================================

MOBILE_OTP_SMS_TEMPLATE = "Your OTP for mobile verification is {otp}"

RESET_PASSWORD_EMAIL_SUBJECT = "Reset Password OTP"
RESET_PASSWORD_EMAIL_TEMPLATE = "Your OTP for resetting your password is {otp}"

# ============================================================
# RESPONSES
# ============================================================

USER_REGISTERED_MESSAGE = "User registered successfully"
USER_EXISTS_MESSAGE = "User already exists"
USER_NOT_FOUND_MESSAGE = "User not found"
OTP_SENT_MESSAGE = "OTP sent successfully"
OTP_VERIFIED_MESSAGE = "OTP verified successfully"
PIN_SET_MESSAGE = "PIN set successfully"
PIN_ALREADY_SET_MESSAGE = "PIN already set"
PASSWORD_RESET_MESSAGE = "Password reset successfully"
LOGGED_IN_MESSAGE = "Logged in"
LOGIN_FAILED_MESSAGE = "Authentication failed"
