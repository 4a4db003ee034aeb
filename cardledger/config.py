"""
Application configuration using Pydantic Settings
"""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """
    # Application
    TIMEZONE: str = "Asia/Seoul"  # только для вычисления "сегодня" в API
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Reconciliation window (months around the current month)
    PAST_MONTHS: int = 6
    FUTURE_MONTHS: int = 6

    # Forecast: number of upcoming payments per card
    FORECAST_HORIZON: int = 3

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Игнорировать дополнительные поля из переменных окружения
    )


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance (singleton)
    """
    return Settings()
