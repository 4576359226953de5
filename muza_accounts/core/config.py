"""Application configuration"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # API
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Muza Accounts API"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Security
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 1440  # 24 hours
    MIN_PASSWORD_LENGTH: int = 6

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./muza_accounts.db"

    # URLs
    # WHY: Stored avatar paths are relative; clients need absolute URLs
    PUBLIC_BASE_URL: str = "http://localhost:5000"

    # Uploads
    UPLOAD_DIR: str = "uploads"
    MAX_PROFILE_IMAGE_BYTES: int = 5 * 1024 * 1024

    # Verification codes
    VERIFICATION_CODE_TTL_MINUTES: int = 15

    # Localization of user-facing messages ("uk" or "en")
    LOCALE: str = "uk"

    # Email
    EMAIL_FROM: str = "noreply@muza.life"
    EMAIL_FROM_NAME: str = "Muza Life"
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    RESEND_API_KEY: Optional[str] = None
    NOTIFY_PREVIOUS_EMAIL: bool = True

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    RATE_LIMIT_ENABLED: bool = True

    # Errors
    # WHY: Raw downstream error text is useful in development but must not
    # reach clients in production
    EXPOSE_ERROR_DETAILS: bool = False

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    @property
    def smtp_enabled(self) -> bool:
        """SMTP delivery needs at least a host."""
        return bool(self.SMTP_HOST)

    @property
    def async_database_url(self) -> str:
        """Get async database URL"""
        return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")


settings = Settings()
