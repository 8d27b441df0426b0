"""Application settings using Pydantic."""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    This uses Pydantic to:
    1. Load values from .env file
    2. Validate data types
    3. Provide defaults
    """

    # API Settings
    PROJECT_NAME: str = "MinhaVez"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Environment & Logging
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]

    # Supabase
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None  # anon key, RLS applies
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None  # bypasses RLS, server-side only

    # Redis (rate limiting for public endpoints)
    REDIS_URL: Optional[str] = None
    RATE_LIMIT_REQUESTS: int = 20
    RATE_LIMIT_WINDOW: int = 60  # seconds

    # Queue behaviour
    DEFAULT_TIMEZONE: str = "America/Sao_Paulo"
    # Minutes each waiting customer adds to the estimate. Shared by the
    # public summary, the join endpoint and the live recalculator.
    QUEUE_MINUTES_PER_CUSTOMER: int = 15

    # "You were called" effect sent to the customer's browser
    CALL_NOTIFICATION_TITLE: str = "Você foi chamado!"
    CALL_NOTIFICATION_ICON: str = "/icon.png"
    CALL_VIBRATION_PATTERN: List[int] = [200, 100, 200, 100, 200]
    CALL_SOUND_URL: str = "/notification.mp3"
    CALL_FALLBACK_BEEP_HZ: int = 800
    CALL_FALLBACK_BEEP_MS: int = 500

    # Load environment variables from .env; extra fields are ignored.
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Create cached settings instance.
    """
    return Settings()


# Create a single instance for easy importing
settings = get_settings()
