"""
Configuration Settings
======================

Centralized configuration using Pydantic V2 Settings.
"""

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_env: str = Field(default="development")
    app_debug: bool = Field(default=False)
    database_url: str = Field(default="sqlite:///./data/roster.db")
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=2000, ge=1)
    lock_nowait: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    @field_validator("max_page_size")
    @classmethod
    def validate_page_sizes(cls, v: int, info: ValidationInfo) -> int:
        """Ensure the page size cap is not below the default page size."""
        default_size = info.data.get("default_page_size")
        if default_size is not None and v < default_size:
            raise ValueError(f"max_page_size ({v}) must be >= default_page_size ({default_size})")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the level name and reject unknown ones."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
