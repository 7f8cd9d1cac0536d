from typing import Optional, Any

class UserServiceError(Exception):
    """
    Base exception for the accounts service.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ValidationError(UserServiceError):
    """
    Raised when input validation fails.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)

class NotFoundError(UserServiceError):
    """
    Raised when no user matches the lookup.
    """
    def __init__(self, message: str = "User not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=400, details=details)

class ConflictError(UserServiceError):
    """
    Raised on duplicate registration or a second PIN setup.
    """
    def __init__(self, message: str = "Conflict", details: Optional[Any] = None):
        super().__init__(message, code="CONFLICT", status_code=400, details=details)

class AuthenticationError(UserServiceError):
    """
    Raised when authentication fails.
    """
    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)

class OtpError(UserServiceError):
    """
    Raised when an OTP challenge cannot be consumed.

    ``reason`` is one of NOT_FOUND, MISMATCH or EXPIRED.
    """
    NOT_FOUND = "NOT_FOUND"
    MISMATCH = "MISMATCH"
    EXPIRED = "EXPIRED"

    _MESSAGES = {
        NOT_FOUND: "No OTP pending",
        MISMATCH: "Invalid OTP",
        EXPIRED: "OTP expired",
    }

    def __init__(self, reason: str, details: Optional[Any] = None):
        self.reason = reason
        super().__init__(self._MESSAGES[reason], code=f"OTP_{reason}", status_code=400, details=details)

class DeliveryError(UserServiceError):
    """
    Raised when the SMS or email provider fails to accept a message.
    """
    def __init__(self, message: str = "Notification delivery failed", details: Optional[Any] = None):
        super().__init__(message, code="DELIVERY_FAILED", status_code=500, details=details)
