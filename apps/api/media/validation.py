"""
Media asset validation.

Checks declared MIME type and byte size against upload policy. Pure and
synchronous: runs before a key is generated or a backend is touched.
"""

from dataclasses import dataclass

from apps.api.media.error_codes import FILE_TOO_LARGE_MESSAGE, INVALID_FILE_TYPE_MESSAGE
from apps.api.media.schemas import FileMeta

BYTES_PER_MB = 1024 * 1024

# MIME type -> accepted file extensions (first one is canonical)
ALLOWED_IMAGE_TYPES: dict[str, tuple[str, ...]] = {
    "image/jpeg": (".jpg", ".jpeg"),
    "image/png": (".png",),
    "image/webp": (".webp",),
}

DEFAULT_MAX_SIZE_MB = 5


@dataclass(frozen=True)
class ValidationFailure:
    """Why an asset was rejected."""

    field: str
    message: str


def validate_asset(
    file_meta: FileMeta,
    max_size_mb: int = DEFAULT_MAX_SIZE_MB,
) -> ValidationFailure | None:
    """
    Validate an asset's declared type and size.

    Args:
        file_meta: Declared filename, MIME type and size
        max_size_mb: Upload size limit in megabytes

    Returns:
        ValidationFailure, or None if the asset is acceptable
    """
    if file_meta.mime_type.lower() not in ALLOWED_IMAGE_TYPES:
        return ValidationFailure(field="mime_type", message=INVALID_FILE_TYPE_MESSAGE)

    if file_meta.size_bytes > max_size_mb * BYTES_PER_MB:
        return ValidationFailure(
            field="size_bytes",
            message=FILE_TOO_LARGE_MESSAGE.format(limit_mb=max_size_mb),
        )

    return None
