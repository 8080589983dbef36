"""
Health check endpoint.
GET /health - Returns 200 with the active storage backend.
"""

from typing import Any

from fastapi import APIRouter, Depends

from apps.api.dependencies import get_media_service
from apps.api.media.service import MediaUploadService

router = APIRouter()


@router.get("/health")
def health_check(
    service: MediaUploadService = Depends(get_media_service),
) -> dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        200 + {"status": "ok", "storage_backend": ...}
    """
    return {
        "status": "ok",
        "storage_backend": service.storage.backend_name,
        "max_upload_size_mb": service.max_size_mb,
    }
