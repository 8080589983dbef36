"""API routers package."""

from apps.api.routers import health, media

__all__ = ["health", "media"]
