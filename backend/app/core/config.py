# backend/app/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Application settings, read from the environment (and backend/.env)."""

    model_config = SettingsConfigDict(extra="ignore", case_sensitive=False)

    environment: str = "development"
    is_testing: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./drivingschool.db"

    # Tokens
    secret_key: SecretStr = SecretStr("change-me-in-production")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # One-time codes
    otp_ttl_minutes: int = Field(15, ge=1)
    otp_sweep_interval_seconds: float = Field(60.0, gt=0)
    otp_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"

    # Login throttling (per email + origin IP, per calendar day)
    max_login_attempts: int = Field(5, ge=1)
    rate_limit_timezone: str = "America/Vancouver"

    # Bookings
    pending_booking_expiry_hours: int = Field(24, ge=1)
    min_lesson_minutes: int = 30
    max_lesson_minutes: int = 480

    # Email
    resend_api_key: str | None = None
    from_email: str = "VanCastro Driving School <bookings@vancastro.ca>"
    frontend_url: str = "http://localhost:3000"

    @field_validator("rate_limit_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("database_url")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        # Heroku-style URLs use the deprecated "postgres" scheme
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def get_database_url(self) -> str:
        return self.database_url


settings = Settings()
