"""
Storage backend exception types.

Provides consistent error handling across all storage backends so callers
can tell infrastructure failures apart without parsing vendor errors.
"""


class StorageBackendError(Exception):
    """Base exception for all storage backend errors."""

    def __init__(
        self,
        message: str,
        backend: str | None = None,
        key: str | None = None,
    ):
        self.message = message
        self.backend = backend
        self.key = key
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.backend:
            parts.insert(0, f"[{self.backend}]")
        if self.key:
            parts.append(f"(key={self.key})")
        return " ".join(parts)


class StorageWriteError(StorageBackendError):
    """Raised when writing or deleting a blob fails (stream error, disk full)."""


class ObjectPublishError(StorageWriteError):
    """
    Raised when a blob was written but could not be made publicly readable.

    The object exists in the bucket but is not servable, so the caller has
    to treat the upload as failed and remove the orphan.
    """


class StoragePermissionError(StorageBackendError):
    """Raised on credential or authorization failures talking to the backend."""


class StorageNetworkError(StorageBackendError):
    """Raised on connectivity failures to a remote backend."""


class StorageTimeoutError(StorageBackendError):
    """Raised when the backend did not answer within the allotted time."""


class InvalidStorageKeyError(StorageBackendError):
    """Raised when a key cannot address a blob in this backend (e.g. path traversal)."""


class StorageConfigurationError(StorageBackendError):
    """Raised at startup when the storage configuration is incomplete."""
