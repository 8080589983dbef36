"""
FastAPI application entrypoint.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from apps.api.config import Settings, get_settings
from apps.api.media.service import MediaUploadService
from apps.api.routers import health, media
from packages.shared.exceptions import AppException, app_exception_handler
from packages.shared.storage import (
    LocalStorageConfig,
    create_storage_backend,
    resolve_storage_config,
)

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    Storage configuration is resolved once here; the backend and upload
    service are created at startup and shared by every request.
    """
    settings = settings or get_settings()
    storage_config = resolve_storage_config(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        storage = create_storage_backend(storage_config)
        app.state.media_service = MediaUploadService.from_settings(storage, settings)
        logger.info(f"Media upload service ready ({storage.backend_name} backend)")
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_exception_handler(AppException, app_exception_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(media.router, prefix=settings.api_v1_prefix, tags=["media"])

    # Serve locally stored files at the URLs the local backend hands out
    if isinstance(storage_config, LocalStorageConfig):
        app.mount(
            f"/{storage_config.url_prefix.strip('/')}",
            StaticFiles(directory=storage_config.base_path, check_dir=False),
            name="uploads",
        )

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "apps.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
