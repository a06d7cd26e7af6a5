"""Configuration management using Pydantic Settings"""

from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class TwiceMonthlyFallback(str, Enum):
    """How a twice-monthly income is paid when per-slot amounts are absent"""

    REPEAT = "repeat"  # full amount on each of the two dates
    SPLIT = "split"  # amount halved across the two dates, remainder on the second


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "cashflow-gateway"
    log_level: str = "INFO"

    # Calendar used to resolve "today" when no start date is given
    timezone: str = "UTC"

    # Projection
    default_projection_days: int = 30
    max_projection_days: int = 366

    # Amount policies
    allow_negative_amounts: bool = True
    twice_monthly_fallback: TwiceMonthlyFallback = TwiceMonthlyFallback.REPEAT


settings = Settings()
