"""
FastAPI dependencies for the media upload service.
"""

from fastapi import Request

from apps.api.media.service import MediaUploadService


def get_media_service(request: Request) -> MediaUploadService:
    """Return the process-wide upload service built at startup."""
    return request.app.state.media_service
