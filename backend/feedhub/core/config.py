from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str

    # Application
    DEBUG: bool = False
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Feed fetching
    FEED_FETCH_TIMEOUT_SECONDS: float = 30.0
    FEED_USER_AGENT: str = "FeedHub/1.0 (+https://github.com/feedhub/feedhub)"

    # Validation cache
    FEED_CACHE_TTL_SECONDS: int = 180  # 3 minutes
    FEED_CACHE_MAX_SIZE: int = 999

    # Background refresh
    FEED_REFRESH_AUTOSTART: bool = True
    FEED_REFRESH_INTERVAL_MINUTES: int = 5
    DEFAULT_REFRESH_RATE_MINUTES: int = 60

    model_config = SettingsConfigDict(env_file=".env")


settings = Settings()
