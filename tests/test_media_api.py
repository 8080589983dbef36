"""
Tests for the media HTTP endpoints.

Tests cover:
- POST /api/v1/owners/{owner_id}/media (upload)
- Static serving of locally stored files
- DELETE /api/v1/media/{key} (idempotent retire)
- Error responses per error kind
- GET /health
- The uvicorn launcher
"""

import io
from unittest.mock import MagicMock

import pytest
import uvicorn
from fastapi import UploadFile, status
from fastapi.testclient import TestClient
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import Headers, UploadFile as StarletteUploadFile

from apps.api import main
from apps.api.config import Settings
from apps.api.media.service import MediaUploadService
from apps.api.routers.media import upload_media
from packages.shared.exceptions import ValidationError
from packages.shared.storage import StorageTimeoutError
from conftest import KB, MB, SpyStorage, image_bytes


def upload(client: TestClient, content: bytes, filename: str = "me.jpg", mime_type: str = "image/jpeg", owner: str = "alice"):
    files = {"file": (filename, io.BytesIO(content), mime_type)}
    return client.post(f"/api/v1/owners/{owner}/media", files=files)


class TestUploadEndpoint:
    """Tests for POST /owners/{owner_id}/media."""

    def test_upload_success(self, client: TestClient, upload_dir):
        """Valid JPEG -> 201 with key and public URL."""
        content = image_bytes(100 * KB)

        response = upload(client, content)

        assert response.status_code == status.HTTP_201_CREATED, response.text
        data = response.json()
        assert data["success"] is True
        assert data["key"].startswith("alice-")
        assert data["public_url"] == f"/uploads/{data['key']}"
        assert data["mime_type"] == "image/jpeg"
        assert data["size_bytes"] == 100 * KB
        assert (upload_dir / data["key"]).read_bytes() == content

    def test_uploaded_file_is_served(self, client: TestClient):
        """The public URL of a local upload is servable."""
        content = image_bytes(2 * KB, header=b"\x89PNG\r\n\x1a\n")
        data = upload(client, content, "a.png", "image/png").json()

        response = client.get(data["public_url"])

        assert response.status_code == 200
        assert response.content == content

    def test_invalid_type_returns_422(self, client: TestClient, upload_dir):
        """Disallowed MIME type -> 422 with the user-facing message."""
        response = upload(client, b"GIF89a....", "a.gif", "image/gif")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "Invalid file type. Only JPEG, PNG, and WebP images are allowed."
        assert not upload_dir.exists()

    def test_too_large_returns_422(self, client: TestClient):
        """Over the 5MB limit -> 422 mentioning the limit."""
        response = upload(client, image_bytes(6 * MB), "big.png", "image/png")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "5MB" in response.json()["error"]

    def test_empty_file_returns_422(self, client: TestClient):
        response = upload(client, b"")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["detail"]["errors"]

    def test_missing_file_returns_422(self, client: TestClient):
        response = client.post("/api/v1/owners/alice/media")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_oversized_body_read_is_capped(self, client: TestClient, monkeypatch):
        """The handler reads at most one byte past the limit before rejecting."""
        read_sizes = []
        original_read = StarletteUploadFile.read

        async def recording_read(self, size: int = -1) -> bytes:
            read_sizes.append(size)
            return await original_read(self, size)

        monkeypatch.setattr(StarletteUploadFile, "read", recording_read)

        response = upload(client, image_bytes(20 * MB))

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "File size exceeds the 5MB limit."
        assert read_sizes == [5 * MB + 1]

    def test_oversized_wrong_type_reports_type(self, client: TestClient):
        """The type check still comes first for oversized bodies."""
        response = upload(client, image_bytes(6 * MB), "a.gif", "image/gif")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "Invalid file type. Only JPEG, PNG, and WebP images are allowed."

    @pytest.mark.asyncio
    async def test_invalid_file_meta_keeps_cause(self):
        """Schema errors are chained onto the 422 error."""
        empty = UploadFile(
            file=io.BytesIO(b""),
            filename="me.jpg",
            headers=Headers({"content-type": "image/jpeg"}),
        )

        with pytest.raises(ValidationError) as exc_info:
            await upload_media("alice", empty, MediaUploadService(SpyStorage()))

        assert isinstance(exc_info.value.__cause__, PydanticValidationError)

    def test_timeout_returns_504(self, client: TestClient):
        """Backend timeouts surface as 504 with a generic message."""
        spy = SpyStorage()
        spy.put_error = StorageTimeoutError("deadline exceeded at 10.0.0.7", backend="spy")
        client.app.state.media_service = MediaUploadService(spy)

        response = upload(client, image_bytes(KB))

        assert response.status_code == status.HTTP_504_GATEWAY_TIMEOUT
        body = response.json()
        assert body["error"] == "Upload operation timed out"
        assert body["detail"]["kind"] == "timeout_error"
        assert "10.0.0.7" not in response.text
        assert spy.delete_calls == spy.put_calls


class TestDeleteEndpoint:
    """Tests for DELETE /media/{key}."""

    def test_delete_is_idempotent(self, client: TestClient, upload_dir):
        key = upload(client, image_bytes(KB)).json()["key"]

        first = client.delete(f"/api/v1/media/{key}")
        second = client.delete(f"/api/v1/media/{key}")

        assert first.status_code == 200
        assert first.json()["deleted"] is True
        assert second.status_code == 200
        assert second.json()["deleted"] is False
        assert not (upload_dir / key).exists()


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_reports_backend(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "storage_backend": "local", "max_upload_size_mb": 5}


class TestServerEntrypoint:
    """Tests for the uvicorn launcher."""

    def test_run_uses_configured_host_and_port(self, monkeypatch):
        settings = Settings(_env_file=None, host="127.0.0.1", port=9001)
        uvicorn_run = MagicMock()
        monkeypatch.setattr(main, "get_settings", lambda: settings)
        monkeypatch.setattr(uvicorn, "run", uvicorn_run)

        main.run()

        uvicorn_run.assert_called_once_with(
            "apps.api.main:app",
            host="127.0.0.1",
            port=9001,
            reload=False,
            log_level="info",
        )
