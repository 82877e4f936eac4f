"""
API configuration settings.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class APIConfig(BaseSettings):
    """API configuration settings, read from API_* environment variables."""

    # API Settings
    api_title: str = "Book Catalog API"
    api_version: str = "1.0.0"
    api_description: str = "CRUD REST API over a MongoDB book collection"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Upper bound on every store call made by a handler
    store_timeout_seconds: float = 5.0

    # CORS Settings
    cors_origins: List[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["*"]
    cors_allow_headers: List[str] = ["*"]

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="API_",
        env_file=".env",
        extra="ignore",
    )


# Global config instance
config = APIConfig()
