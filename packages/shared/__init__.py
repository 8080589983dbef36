"""Shared utilities package."""

from packages.shared.exceptions import (
    AppException,
    MediaStorageException,
    ValidationError,
)

__all__ = [
    "AppException",
    "MediaStorageException",
    "ValidationError",
]
