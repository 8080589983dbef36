"""Media upload module for profile pictures and cover photos."""

from apps.api.media.error_codes import MediaErrorKind
from apps.api.media.keys import generate_asset_key
from apps.api.media.schemas import DeleteResult, FileMeta, UploadRequest, UploadResult
from apps.api.media.service import MediaUploadService, UploadState, classify_error
from apps.api.media.validation import ALLOWED_IMAGE_TYPES, ValidationFailure, validate_asset

__all__ = [
    # Error codes
    "MediaErrorKind",
    # Keys
    "generate_asset_key",
    # Schemas
    "DeleteResult",
    "FileMeta",
    "UploadRequest",
    "UploadResult",
    # Service
    "MediaUploadService",
    "UploadState",
    "classify_error",
    # Validation
    "ALLOWED_IMAGE_TYPES",
    "ValidationFailure",
    "validate_asset",
]
