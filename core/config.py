# ==================================================================================
# core/config.py: Billing Service Configuration (Pydantic v2 Settings)
# ==================================================================================
import logging
import sys
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # ------------------------
    # DATABASE CONFIG
    # ------------------------
    DATABASE_URL: str = "sqlite:///./billing.db"

    # ------------------------
    # BILLING CYCLE CONFIG
    # ------------------------
    # Days before the cutoff when a student who paid last month becomes "upcoming"
    UPCOMING_HORIZON_DAYS: int = Field(default=3, ge=0)
    # Days after the cutoff that are still inside the grace window
    OVERDUE_CONFIRM_DAYS: int = Field(default=5, ge=0)
    # Zone used by the system clock to decide what "today" is
    BILLING_TIMEZONE: str = "UTC"

    @field_validator("BILLING_TIMEZONE")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            raise ValueError(f"Unknown time zone: {value!r}") from None
        return value

    # ------------------------
    # FRONTEND CONFIG
    # ------------------------
    FRONTEND_URL: str = "http://localhost:5173"

    # ------------------------
    # ENVIRONMENT SETTINGS
    # ------------------------
    ENVIRONMENT: str = "development"  # 'development' | 'production'
    DEBUG: bool = False

    @property
    def IS_PRODUCTION(self) -> bool:
        """Convenience helper to check if running in production"""
        return self.ENVIRONMENT.lower() == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# ------------------------
# Global Settings Loader
# ------------------------
try:
    settings = Settings()
    logger.info("✅ Environment variables loaded (environment=%s, debug=%s)", settings.ENVIRONMENT, settings.DEBUG)
except ValidationError as e:
    logger.error("❌ Environment configuration error, invalid settings: %s", e)
    sys.exit(1)
