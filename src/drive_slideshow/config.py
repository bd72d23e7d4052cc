"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    google_client_id: str | None = None
    google_client_secret: str | None = None
    oauth_redirect_uri: str = "http://localhost:8000/oauth/callback"
    storage_backend: str = "file"
    storage_path: str = ".drive-slideshow/storage.json"
    storage_scope: str = "default"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    slide_interval_seconds: float = 3.0
    auth_poll_interval_seconds: float = 2.0
    thumbnail_width: int = 800
    drive_page_size: int = 100
    drive_follow_pages: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
