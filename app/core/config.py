"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, secrets, transports)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings
from typing import Optional, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="accounts",
        description="MongoDB database name"
    )

    # Session tokens
    JWT_SECRET: str = Field(
        default="change-me-in-production",
        description="Secret used to sign session tokens"
    )
    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="Session token signing algorithm"
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60,
        description="Session token lifetime in minutes"
    )
    SESSION_COOKIE_NAME: str = Field(
        default="jwt",
        description="Cookie carrying the session token after OTP verification"
    )

    # Credentials
    PASSWORD_HASH_ROUNDS: int = Field(
        default=10,
        description="bcrypt cost factor for password and PIN hashes"
    )

    # OTP
    OTP_EXPIRY_MINUTES: int = Field(
        default=10,
        description="Lifetime of an issued OTP challenge"
    )

    # Twilio SMS
    TWILIO_ACCOUNT_SID: Optional[str] = Field(
        default=None,
        description="Twilio account SID"
    )
    TWILIO_AUTH_TOKEN: Optional[str] = Field(
        default=None,
        description="Twilio auth token"
    )
    TWILIO_PHONE_NUMBER: Optional[str] = Field(
        default=None,
        description="Sender number for OTP SMS"
    )
    TWILIO_BASE_URL: str = Field(
        default="https://api.twilio.com/2010-04-01",
        description="Twilio REST API base URL"
    )

    # SMTP
    SMTP_HOST: str = Field(
        default="localhost",
        description="SMTP server host"
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP server port"
    )
    SMTP_SECURE: bool = Field(
        default=False,
        description="Use implicit TLS (SMTPS) instead of STARTTLS"
    )
    SMTP_USERNAME: Optional[str] = Field(
        default=None,
        description="SMTP login user"
    )
    SMTP_PASSWORD: Optional[str] = Field(
        default=None,
        description="SMTP login password"
    )
    SMTP_FROM_EMAIL: str = Field(
        default="no-reply@localhost",
        description="Sender address for password reset mails"
    )

    NOTIFICATION_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Upper bound for a single SMS or email delivery call"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api/users",
        description="User routes prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v, info: ValidationInfo):
        """Ensure the signing secret is changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v == "change-me-in-production":
            raise ValueError("JWT_SECRET must be changed in production environment")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if settings.OTP_EXPIRY_MINUTES <= 0:
        errors.append("OTP_EXPIRY_MINUTES must be positive")

    # Production-specific validations
    if settings.is_production:
        if not (settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_PHONE_NUMBER):
            errors.append("TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER are required in production")
        if not settings.SMTP_USERNAME:
            errors.append("SMTP_USERNAME is required in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
