"""
Configuration management for the Composio bridge.

Uses Pydantic Settings for type-safe configuration with .env file support.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Composio Settings
    composio_api_key: str = Field(default="", description="Composio project API key")
    composio_base_url: Optional[str] = Field(default=None, description="Override for the Composio API base URL")
    composio_timeout: float = Field(default=30.0, description="Upstream request timeout in seconds")

    # Google Calendar Settings
    google_calendar_toolkit: str = Field(default="googlecalendar")
    google_calendar_list_action: str = Field(default="GOOGLECALENDAR_EVENTS_LIST")
    google_calendar_toolkit_version: Optional[str] = Field(default=None)

    # API Settings
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    frontend_url: str = Field(default="http://localhost:5173")
    backend_url: str = Field(default="", description="Public backend URL used for OAuth callbacks")
    cors_origins: str = Field(default="", description="Extra comma-separated origins allowed by CORS")

    @property
    def public_backend_url(self) -> str:
        """Backend URL with the localhost fallback used when BACKEND_URL is unset."""
        url = self.backend_url or f"http://localhost:{self.port}"
        return url.rstrip("/")

    @property
    def public_frontend_url(self) -> str:
        return self.frontend_url.rstrip("/")

    @property
    def callback_url(self) -> str:
        return f"{self.public_backend_url}/api/composio/callback"

    @property
    def allowed_origins(self) -> List[str]:
        """Frontend URL plus any extra CORS origins, deduplicated in order."""
        origins = [self.public_frontend_url]
        for origin in self.cors_origins.split(","):
            origin = origin.strip().rstrip("/")
            if origin and origin not in origins:
                origins.append(origin)
        return origins

    def validate_config(self) -> list[str]:
        """Validate configuration and return list of warnings."""
        issues = []

        if not self.composio_api_key:
            issues.append("COMPOSIO_API_KEY is not set")

        if not self.backend_url:
            issues.append(f"BACKEND_URL is not set, using {self.public_backend_url}")

        return issues


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
