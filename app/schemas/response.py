from pydantic import BaseModel
from typing import Optional, Any

class ErrorResponse(BaseModel):
    """
    Error envelope returned by every failing route.

    ``code`` is machine-readable (e.g. OTP_EXPIRED); ``details`` carries
    field-level validation errors when present.
    """
    error: str
    code: str
    details: Optional[Any] = None
