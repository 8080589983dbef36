"""
Pytest configuration and fixtures.

Provides reusable fixtures for media storage testing:
- spy_storage: In-memory backend that records every call
- media_service: Upload service wired to spy_storage
- local_storage: Filesystem backend rooted in a temp directory
- app_settings / client: FastAPI app on a temp upload directory
"""

import asyncio
from collections.abc import Generator
from pathlib import Path
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from apps.api.config import Settings
from apps.api.media.schemas import FileMeta
from apps.api.media.service import MediaUploadService
from packages.shared.storage import LocalFileStorage, ObjectMetadata, StorageBackend

KB = 1024
MB = 1024 * 1024


def image_bytes(size: int, header: bytes = b"\xff\xd8\xff\xe0") -> bytes:
    """Fake image payload of exactly ``size`` bytes."""
    return (header + b"\x00" * size)[:size]


def file_meta_for(content: bytes, filename: str = "photo.jpg", mime_type: str = "image/jpeg") -> FileMeta:
    return FileMeta(original_filename=filename, mime_type=mime_type, size_bytes=len(content))


# =============================================================================
# Spy Backend
# =============================================================================


class SpyStorage(StorageBackend):
    """
    In-memory storage backend that records calls.

    Failure injection:
    - put_error: raised by put(); with write_before_error the blob is stored first
    - delete_error: raised by delete()
    - put_delay: seconds put() sleeps before writing
    """

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.metadata: dict[str, ObjectMetadata] = {}
        self.calls: list[tuple[str, str]] = []
        self.put_error: Exception | None = None
        self.write_before_error = False
        self.delete_error: Exception | None = None
        self.put_delay = 0.0

    @property
    def backend_name(self) -> str:
        return "spy"

    @property
    def put_calls(self) -> list[str]:
        return [key for op, key in self.calls if op == "put"]

    @property
    def delete_calls(self) -> list[str]:
        return [key for op, key in self.calls if op == "delete"]

    async def put(self, key: str, content: bytes, metadata: ObjectMetadata) -> None:
        self.calls.append(("put", key))
        if self.put_delay:
            await asyncio.sleep(self.put_delay)
        if self.put_error is not None:
            if self.write_before_error:
                self.blobs[key] = content
            raise self.put_error
        self.blobs[key] = content
        self.metadata[key] = metadata

    async def delete(self, key: str) -> bool:
        self.calls.append(("delete", key))
        if self.delete_error is not None:
            raise self.delete_error
        return self.blobs.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        return key in self.blobs

    def public_url(self, key: str) -> str:
        return f"https://cdn.example.test/media/{quote(key, safe='')}"

    def key_from_url(self, url: str) -> str | None:
        return self.strip_url_prefix(url, "https://cdn.example.test/media/")


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def spy_storage() -> SpyStorage:
    """Fresh in-memory spy backend."""
    return SpyStorage()


@pytest.fixture
def media_service(spy_storage: SpyStorage) -> MediaUploadService:
    """Upload service with a 5MB limit and a short timeout."""
    return MediaUploadService(spy_storage, max_size_mb=5, timeout_seconds=0.5)


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    """Not-yet-existing upload directory inside tmp_path."""
    return tmp_path / "uploads"


@pytest.fixture
def local_storage(upload_dir: Path) -> LocalFileStorage:
    """Filesystem backend rooted at upload_dir."""
    return LocalFileStorage(base_path=str(upload_dir), url_prefix="uploads")


# =============================================================================
# App Fixtures
# =============================================================================


@pytest.fixture
def app_settings(upload_dir: Path) -> Settings:
    """Settings for a local-backend app, ignoring any .env file."""
    return Settings(
        _env_file=None,
        storage_backend="local",
        local_upload_path=str(upload_dir),
        uploads_url_prefix="uploads",
        max_upload_size_mb=5,
    )


@pytest.fixture
def client(app_settings: Settings) -> Generator[TestClient, None, None]:
    """
    TestClient for an app built from app_settings.

    Used as a context manager so the startup hook builds the service.
    """
    from apps.api.main import create_app

    with TestClient(create_app(app_settings)) as test_client:
        yield test_client
