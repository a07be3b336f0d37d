"""
Application configuration
Read from environment variables / .env file
"""
from typing import List
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Tirumala Residency HMS"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Storage
    DATABASE_URL: str = "sqlite:///./hms.db"
    STORAGE_BACKEND: str = "sql"  # sql | memory

    # Bookings
    BOOKING_CODE_PREFIX: str = "HMS"
    INITIAL_BOOKING_SEQUENCE: int = 0

    # Audit log: newest-first, entries beyond this count are dropped (0 = keep everything)
    AUDIT_LOG_RETENTION: int = 500

    # Opaque operator recorded as created_by when the caller supplies none
    DEFAULT_OPERATOR: str = "admin"

    # Front desk policy
    BLOCK_UNSETTLED_CHECKOUT: bool = True
    RECOMPUTE_PAYMENT_STATUS_ON_DELETE: bool = False

    CURRENCY_SYMBOL: str = "₹"

    model_config = ConfigDict(env_file=".env", case_sensitive=True)


# Global settings instance
settings = Settings()
