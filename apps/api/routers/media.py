"""
Media API endpoints for profile pictures and cover photos.

Endpoints:
- POST /owners/{owner_id}/media: Upload a new image asset
- DELETE /media/{key}: Retire a superseded asset

Authentication and ownership checks happen upstream; owner_id is trusted.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile as FastAPIUploadFile, status
from pydantic import ValidationError as PydanticValidationError

from apps.api.dependencies import get_media_service
from apps.api.media.error_codes import ERROR_MESSAGES, MediaErrorKind
from apps.api.media.schemas import DeleteResult, FileMeta, UploadResult
from apps.api.media.service import MediaUploadService
from apps.api.media.validation import BYTES_PER_MB, validate_asset
from packages.shared.exceptions import MediaStorageException, ValidationError

router = APIRouter()

HTTP_STATUS_BY_KIND: dict[MediaErrorKind, int] = {
    MediaErrorKind.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    MediaErrorKind.STORAGE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    MediaErrorKind.PERMISSION_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    MediaErrorKind.NETWORK_ERROR: status.HTTP_502_BAD_GATEWAY,
    MediaErrorKind.TIMEOUT_ERROR: status.HTTP_504_GATEWAY_TIMEOUT,
    MediaErrorKind.UNKNOWN_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_for_error(kind: MediaErrorKind, message: str | None) -> None:
    """Turn a failed service result into an HTTP error response."""
    message = message or ERROR_MESSAGES[kind]
    if kind is MediaErrorKind.VALIDATION_ERROR:
        raise ValidationError(message)
    raise MediaStorageException(message, kind=kind.value, status_code=HTTP_STATUS_BY_KIND[kind])


# =============================================================================
# POST /owners/{owner_id}/media - Upload
# =============================================================================


@router.post(
    "/owners/{owner_id}/media",
    response_model=UploadResult,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an image asset",
    description="Upload a JPEG, PNG or WebP image for an owner and get its public URL.",
)
async def upload_media(
    owner_id: str,
    file: Annotated[FastAPIUploadFile, File(description="Image file")],
    service: Annotated[MediaUploadService, Depends(get_media_service)],
) -> UploadResult:
    # Never buffer more than one byte past the limit
    limit_bytes = service.max_size_mb * BYTES_PER_MB
    content = await file.read(limit_bytes + 1)

    try:
        file_meta = FileMeta(
            original_filename=file.filename or "",
            mime_type=file.content_type or "",
            size_bytes=len(content),
        )
    except PydanticValidationError as e:
        raise ValidationError(
            ERROR_MESSAGES[MediaErrorKind.VALIDATION_ERROR],
            errors=[{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()],
        ) from e

    if len(content) > limit_bytes:
        failure = validate_asset(file_meta, max_size_mb=service.max_size_mb)
        raise ValidationError(failure.message)

    result = await service.upload(owner_id, file_meta, content)
    if not result.success:
        raise_for_error(result.error, result.message)
    return result


# =============================================================================
# DELETE /media/{key} - Retire asset
# =============================================================================


@router.delete(
    "/media/{key}",
    response_model=DeleteResult,
    summary="Delete a stored asset",
    description="Idempotent: deleting a missing key succeeds with deleted=false.",
)
async def delete_media(
    key: str,
    service: Annotated[MediaUploadService, Depends(get_media_service)],
) -> DeleteResult:
    result = await service.delete_asset(key)
    if not result.success:
        raise_for_error(result.error, result.message)
    return result
