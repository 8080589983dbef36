"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

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
    app_name: str = "Media Upload Storage Service"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # API
    api_v1_prefix: str = "/api/v1"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # File Storage
    storage_backend: Literal["local", "s3"] = "local"
    local_upload_path: str = "./uploads"
    uploads_url_prefix: str = "uploads"  # Static mount for local files

    # S3-compatible object store (production)
    s3_bucket: str = ""
    s3_endpoint_url: str | None = None  # MinIO / GCS interop, None for AWS S3
    s3_region: str = "us-east-1"
    s3_access_key_id: str | None = None
    s3_secret_access_key: str | None = None
    s3_profile: str | None = None  # Named profile in the shared credentials file
    s3_public_host: str | None = None  # Overrides host in public URLs
    s3_make_public: bool = True

    # Upload Limits
    max_upload_size_mb: int = 5
    storage_timeout_seconds: float = 30.0
    max_concurrent_uploads: int = 16


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
