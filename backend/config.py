"""Application configuration using pydantic-settings."""

from decimal import Decimal
from typing import Optional

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./corporate_actions.db"
    SQLITE_BUSY_TIMEOUT_MS: int = 5000

    # Corporate action processing
    DEFAULT_QUANTITY_INCREMENT: Decimal = Decimal("0.00000001")
    BASIS_TOLERANCE: Decimal = Decimal("0.01")
    QUALIFIED_DIVIDEND_MIN_HOLDING_DAYS: int = 61
    DIVIDEND_WITHHOLDING_RATE: Decimal = Decimal("0")

    # App settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    # Overrides LOG_LEVEL for the corporate action engine loggers
    ENGINE_LOG_LEVEL: Optional[str] = None
    # Apply/reverse history is also appended here when set
    LOG_FILE: Optional[str] = None

    @field_validator("LOG_LEVEL", "ENGINE_LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        """Validate and normalize a level name to an uppercase Python logging level."""
        if v is None or v == "":
            return None
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"{info.field_name} must be one of {valid}, got {v!r}")
        return v.upper()

    @field_validator("DEFAULT_QUANTITY_INCREMENT", "BASIS_TOLERANCE")
    @classmethod
    def validate_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError(f"must be positive, got {v}")
        return v

    @field_validator("DIVIDEND_WITHHOLDING_RATE")
    @classmethod
    def validate_withholding_rate(cls, v: Decimal) -> Decimal:
        """Withholding is a fraction of gross income in [0, 1)."""
        if v < 0 or v >= 1:
            raise ValueError(f"DIVIDEND_WITHHOLDING_RATE must be in [0, 1), got {v}")
        return v


settings = Settings()
