"""Application configuration via pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Dapp Portal Payment Relay"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_prefix: str = "/api"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 3001

    # Payment API (Dapp Portal)
    client_id: Optional[str] = None
    client_secret: Optional[str] = Field(default=None)
    payment_api_base: str = "https://payment.dappportal.io/api/payment-v1"
    payment_api_timeout: float = 30.0

    # Must be reachable from the payment API, e.g. an ngrok HTTPS URL
    server_url: str = "http://localhost:3001"

    # Shared secret expected in X-Callback-Secret on status callbacks (disabled when unset)
    callback_secret: Optional[str] = None

    # Advisory countdown shown to buyers; has no effect on payment state
    payment_timeout_seconds: int = 180

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
