"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Storage
    storage_backend: str = "memory"
    database_url: str = "postgresql+asyncpg://backoffice:backoffice_dev_password@db:5432/backoffice"

    # Authentication
    backoffice_api_key: str = "dev-api-key-change-in-production"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Queries
    business_timezone: str = "UTC"
    default_page_limit: int = 10
    max_page_limit: int = 100

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
