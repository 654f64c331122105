"""
carejourney/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, JWT secret, object storage, etc.)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import Optional, Literal


DEFAULT_JWT_SECRET = "change-me-in-production"


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
        default="carejourney",
        description="MongoDB database name"
    )

    # Authentication
    JWT_SECRET: str = Field(
        default=DEFAULT_JWT_SECRET,
        description="Secret used to sign bearer tokens"
    )
    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    JWT_EXPIRE_DAYS: Optional[int] = Field(
        default=None,
        description="Token lifetime in days (None keeps tokens valid until log-out)"
    )
    PASSWORD_BCRYPT_ROUNDS: int = Field(
        default=10,
        description="bcrypt cost factor for passwords and one-time tokens"
    )
    VERIFICATION_TOKEN_TTL_SECONDS: int = Field(
        default=3600,
        description="Lifetime of email verification and password reset tokens"
    )
    PASSWORD_RESET_LINK: str = Field(
        default="http://localhost:8000/reset-password",
        description="Base URL of the password reset page"
    )

    # Object storage (S3 compatible)
    S3_ACCESS_KEY: Optional[str] = Field(
        default=None,
        description="Object storage access key"
    )
    S3_SECRET_KEY: Optional[str] = Field(
        default=None,
        description="Object storage secret key"
    )
    S3_REGION: str = Field(
        default="us-east-1",
        description="Object storage region"
    )
    S3_BUCKET_NAME: str = Field(
        default="carejourney",
        description="Bucket receiving uploaded images"
    )
    S3_ENDPOINT_URL: Optional[str] = Field(
        default=None,
        description="Custom endpoint (MinIO, localstack); None uses AWS"
    )
    S3_PUBLIC_URL: Optional[str] = Field(
        default=None,
        description="Public base URL for stored objects; derived from bucket/region when unset"
    )
    MAX_UPLOAD_SIZE: int = Field(
        default=2 * 1024 * 1024,
        description="Maximum accepted upload size in bytes"
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
        default="",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @validator("JWT_SECRET")
    def validate_jwt_secret(cls, v, values):
        """Ensure the signing secret is changed in production."""
        if values.get("ENVIRONMENT") == "production" and v == DEFAULT_JWT_SECRET:
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

    if not settings.S3_BUCKET_NAME:
        errors.append("S3_BUCKET_NAME is required")

    if settings.MAX_UPLOAD_SIZE <= 0:
        errors.append("MAX_UPLOAD_SIZE must be positive")

    # Production-specific validations
    if settings.is_production:
        if not settings.S3_ACCESS_KEY or not settings.S3_SECRET_KEY:
            errors.append("S3_ACCESS_KEY and S3_SECRET_KEY are required in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
