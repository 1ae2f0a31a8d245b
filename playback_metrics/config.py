"""Application configuration using Pydantic BaseSettings.

Loads all configuration from environment variables and .env file.
Sections: General, API Server, Metrics.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the playback metrics service.

    All values are loaded from environment variables and/or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── General ──────────────────────────────────────────────────────────
    app_name: str = Field(default="PlaybackMetrics", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=True, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # ── API Server ───────────────────────────────────────────────────────
    api_host: str = Field(default="0.0.0.0", description="API bind host")
    api_port: int = Field(default=8000, description="API bind port")
    api_key: Optional[str] = Field(default=None, description="API key for event endpoints (optional)")

    # ── Metrics ──────────────────────────────────────────────────────────
    metrics_path: str = Field(default="/metrics", description="Scrape endpoint path")
    include_process_metrics: bool = Field(
        default=True,
        description="Register process, platform and GC collectors alongside playback metrics",
    )

    # ── Validators ───────────────────────────────────────────────────────

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            msg = f"Invalid log level '{v}'. Must be one of: {valid_levels}"
            raise ValueError(msg)
        return upper

    @field_validator("api_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Ensure the port is in the TCP range."""
        if not 1 <= v <= 65535:
            msg = f"API port must be between 1 and 65535, got {v}"
            raise ValueError(msg)
        return v

    @field_validator("metrics_path")
    @classmethod
    def validate_metrics_path(cls, v: str) -> str:
        """Ensure the scrape path is absolute."""
        if not v.startswith("/"):
            msg = f"Metrics path must start with '/', got '{v}'"
            raise ValueError(msg)
        return v.rstrip("/") or "/"

    @model_validator(mode="after")
    def validate_production_config(self) -> "Settings":
        """Ensure production environment has required security settings."""
        if self.app_env == "production" and self.api_key is None:
            raise ValueError(
                "API_KEY must be set when APP_ENV=production. "
                "Set API_KEY in your environment or .env file."
            )
        return self


def get_settings() -> Settings:
    """Create and return a Settings instance.

    Returns:
        Settings: Application configuration loaded from environment.
    """
    return Settings()
