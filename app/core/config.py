"""Application settings.

Centralizes configuration (upload limits, template storage, logging) so the
rest of the app can depend on a single settings object rather than scattered
env reads.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables and .env."""

    # Upload limits
    max_upload_bytes: int = 50 * 1024 * 1024

    # Template storage
    template_store_dir: str = "data/templates"

    # Logging
    log_level: str = "INFO"

    # Export defaults
    default_sort: str = "medication_name"

    # Load variables from a local .env file when present.
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


# Singleton settings instance used throughout the application.
settings = Settings()
