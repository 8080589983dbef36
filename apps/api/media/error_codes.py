"""Structured error kinds for media upload and deletion."""

from enum import Enum


class MediaErrorKind(str, Enum):
    """
    Error kinds reported by the media upload service.

    Only VALIDATION_ERROR is the caller's fault; the rest are server-side
    or infrastructure failures.
    """

    VALIDATION_ERROR = "validation_error"
    STORAGE_ERROR = "storage_error"
    PERMISSION_ERROR = "permission_error"
    NETWORK_ERROR = "network_error"
    TIMEOUT_ERROR = "timeout_error"
    UNKNOWN_ERROR = "unknown_error"


# Human-readable error messages, safe to show to end users
ERROR_MESSAGES: dict[MediaErrorKind, str] = {
    MediaErrorKind.VALIDATION_ERROR: "Invalid file data",
    MediaErrorKind.STORAGE_ERROR: "Failed to store file in storage",
    MediaErrorKind.PERMISSION_ERROR: "Insufficient permissions",
    MediaErrorKind.NETWORK_ERROR: "Network error while uploading",
    MediaErrorKind.TIMEOUT_ERROR: "Upload operation timed out",
    MediaErrorKind.UNKNOWN_ERROR: "Failed to upload file",
}

INVALID_FILE_TYPE_MESSAGE = "Invalid file type. Only JPEG, PNG, and WebP images are allowed."
FILE_TOO_LARGE_MESSAGE = "File size exceeds the {limit_mb}MB limit."
FILE_NOT_FOUND_MESSAGE = "File not found"
FOREIGN_URL_MESSAGE = "URL does not point to a file in this storage"
INVALID_KEY_MESSAGE = "Invalid file key"
DELETE_FAILED_MESSAGE = "Failed to delete file from storage"
