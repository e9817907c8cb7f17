# src/goldnexus/config.py
"""
Application settings, loaded from the environment and an optional `.env` file.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment / DB
    ENV: str = Field(default="dev")
    DATABASE_URL: str = Field(default="sqlite:///./dev.db")

    # JWT session keys (RS256). In production the PEM bodies must come from the env.
    JWT_PRIVATE_KEY: str | None = None
    JWT_PUBLIC_KEY: str | None = None
    JWT_PRIVATE_KEY_PATH: str = "private_key.pem"
    JWT_PUBLIC_KEY_PATH: str = "public_key.pem"
    JWT_ALG: str = "RS256"
    ACCESS_TOKEN_TTL_MINUTES: int = 15
    REFRESH_TOKEN_TTL_DAYS: int = 30

    # Gold price feed
    GOLD_INSTRUMENT_ID: str = "XAU_USD"
    PRICE_TTL_SECONDS: int = 3600
    PRICE_SINGLE_FLIGHT: bool = False
    SWISSQUOTE_BASE_URL: str = "https://forex-data-feed.swissquote.com"
    SWISSQUOTE_PLATFORM: str = "SwissquoteLtd"
    SWISSQUOTE_SERVER: str = "Live5"
    SWISSQUOTE_TIMEOUT_SECONDS: float = 10.0

    # Shared secret for the scheduled price refresh trigger
    CRON_SECRET: str | None = None

    # API
    CORS_ORIGINS: str = "*"

    # Observability
    METRICS_ENABLED: bool = True

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() in ("prod", "production")


settings = Settings()
