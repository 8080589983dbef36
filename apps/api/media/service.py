"""
Media upload service.

Handles:
- Boundary checks and upload policy validation
- Storage key generation
- Bounded, time-limited writes to the active storage backend
- Best-effort cleanup of partially written blobs
- Mapping failures to stable, user-safe error kinds
- Retiring superseded assets
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from apps.api.media.error_codes import (
    DELETE_FAILED_MESSAGE,
    ERROR_MESSAGES,
    FILE_NOT_FOUND_MESSAGE,
    FOREIGN_URL_MESSAGE,
    INVALID_KEY_MESSAGE,
    MediaErrorKind,
)
from apps.api.media.keys import generate_asset_key
from apps.api.media.schemas import DeleteResult, FileMeta, UploadRequest, UploadResult
from apps.api.media.validation import DEFAULT_MAX_SIZE_MB, validate_asset
from packages.shared.storage import (
    InvalidStorageKeyError,
    ObjectMetadata,
    StorageBackend,
    StorageBackendError,
    StorageNetworkError,
    StoragePermissionError,
    StorageTimeoutError,
)

if TYPE_CHECKING:
    from apps.api.config import Settings

logger = logging.getLogger(__name__)


# =============================================================================
# Upload State Machine
# =============================================================================


class UploadState(str, Enum):
    """Per-upload lifecycle states."""

    VALIDATING = "validating"
    KEY_ASSIGNED = "key_assigned"
    WRITING = "writing"
    PUBLISHED = "published"
    COMPENSATING = "compensating"
    FAILED = "failed"


VALID_TRANSITIONS: dict[UploadState, list[UploadState]] = {
    UploadState.VALIDATING: [UploadState.KEY_ASSIGNED, UploadState.FAILED],
    UploadState.KEY_ASSIGNED: [UploadState.WRITING],
    UploadState.WRITING: [UploadState.PUBLISHED, UploadState.COMPENSATING],
    UploadState.COMPENSATING: [UploadState.FAILED],
    UploadState.PUBLISHED: [],  # Terminal
    UploadState.FAILED: [],  # Terminal
}


def can_transition(current: UploadState, target: UploadState) -> bool:
    """Check if a state transition is valid."""
    return target in VALID_TRANSITIONS.get(current, [])


@dataclass
class UploadAttempt:
    """Tracks a single upload through its states."""

    owner_id: str
    state: UploadState = UploadState.VALIDATING
    key: str | None = None

    def transition_to(self, target: UploadState) -> None:
        """
        Move to a new state.

        Raises:
            ValueError: If the transition is not allowed.
        """
        if not can_transition(self.state, target):
            raise ValueError(f"Cannot transition from {self.state.value} to {target.value}")
        logger.debug(f"Upload {self.key or '<no key>'} for {self.owner_id}: {self.state.value} -> {target.value}")
        self.state = target


# =============================================================================
# Error Classification
# =============================================================================


def classify_error(error: BaseException) -> MediaErrorKind:
    """
    Map an exception raised during a storage operation to an error kind.

    Builtin TimeoutError, ConnectionError and PermissionError are OSError
    subclasses, so they are checked before the generic OSError case.
    """
    if isinstance(error, InvalidStorageKeyError):
        return MediaErrorKind.VALIDATION_ERROR
    if isinstance(error, (StorageTimeoutError, TimeoutError)):
        return MediaErrorKind.TIMEOUT_ERROR
    if isinstance(error, (StoragePermissionError, PermissionError)):
        return MediaErrorKind.PERMISSION_ERROR
    if isinstance(error, (StorageNetworkError, ConnectionError)):
        return MediaErrorKind.NETWORK_ERROR
    if isinstance(error, (StorageBackendError, OSError)):
        return MediaErrorKind.STORAGE_ERROR
    return MediaErrorKind.UNKNOWN_ERROR


# =============================================================================
# Service
# =============================================================================


class MediaUploadService:
    """
    Upload orchestrator for user media (profile pictures, cover photos).

    Created once per process around the active storage backend and shared by
    all request handlers. Holds no per-upload state; every upload writes to a
    freshly generated key. Failures are reported through UploadResult and
    DeleteResult rather than raised. No retries happen here.
    """

    def __init__(
        self,
        storage: StorageBackend,
        max_size_mb: int = DEFAULT_MAX_SIZE_MB,
        timeout_seconds: float = 30.0,
        max_concurrent_uploads: int = 16,
    ):
        """
        Initialize the media upload service.

        Args:
            storage: Active storage backend
            max_size_mb: Upload size limit in megabytes
            timeout_seconds: Limit for a single backend write or delete
            max_concurrent_uploads: Parallel backend writes allowed per process
        """
        self.storage = storage
        self.max_size_mb = max_size_mb
        self.timeout_seconds = timeout_seconds
        self._upload_slots = asyncio.Semaphore(max_concurrent_uploads)

    @classmethod
    def from_settings(cls, storage: StorageBackend, settings: "Settings") -> "MediaUploadService":
        """Build the service with limits taken from application settings."""
        return cls(
            storage,
            max_size_mb=settings.max_upload_size_mb,
            timeout_seconds=settings.storage_timeout_seconds,
            max_concurrent_uploads=settings.max_concurrent_uploads,
        )

    # =========================================================================
    # Upload
    # =========================================================================

    async def upload(self, owner_id: str, file_meta: FileMeta, content: bytes) -> UploadResult:
        """
        Validate and store a new asset.

        Args:
            owner_id: Authenticated owner of the asset
            file_meta: Declared filename, MIME type and size
            content: Raw file bytes

        Returns:
            UploadResult with key and public URL, or the error kind and message
        """
        try:
            request = UploadRequest(owner_id=owner_id, file=file_meta, content=content)
        except PydanticValidationError as e:
            logger.warning(f"Invalid upload request from {owner_id!r}: {e.error_count()} error(s)")
            return UploadResult.failure(
                MediaErrorKind.VALIDATION_ERROR,
                ERROR_MESSAGES[MediaErrorKind.VALIDATION_ERROR],
            )
        return await self.upload_request(request)

    async def upload_request(self, request: UploadRequest) -> UploadResult:
        """
        Store an asset described by an already-checked UploadRequest.

        Args:
            request: Owner, file metadata and content

        Returns:
            UploadResult
        """
        attempt = UploadAttempt(owner_id=request.owner_id)
        file_meta = request.file

        logger.info(
            f"Starting upload validation for {request.owner_id}: "
            f"{file_meta.original_filename} ({file_meta.mime_type}, {file_meta.size_bytes} bytes)"
        )

        failure = validate_asset(file_meta, max_size_mb=self.max_size_mb)
        if failure:
            logger.warning(f"Rejected upload from {request.owner_id} ({failure.field}): {failure.message}")
            attempt.transition_to(UploadState.FAILED)
            return UploadResult.failure(MediaErrorKind.VALIDATION_ERROR, failure.message)

        attempt.key = generate_asset_key(request.owner_id, file_meta.original_filename, file_meta.mime_type)
        attempt.transition_to(UploadState.KEY_ASSIGNED)

        metadata = ObjectMetadata(
            content_type=file_meta.mime_type.lower(),
            original_name=file_meta.original_filename,
            owner_id=request.owner_id,
        )

        try:
            attempt.transition_to(UploadState.WRITING)
            async with self._upload_slots:
                await asyncio.wait_for(
                    self.storage.put(attempt.key, request.content, metadata),
                    timeout=self.timeout_seconds,
                )
        except asyncio.CancelledError:
            logger.warning(f"Upload of {attempt.key} cancelled, cleaning up")
            attempt.transition_to(UploadState.COMPENSATING)
            await self._compensate(attempt)
            attempt.transition_to(UploadState.FAILED)
            raise
        except Exception as e:
            kind = classify_error(e)
            if kind is MediaErrorKind.UNKNOWN_ERROR:
                logger.exception(f"Upload of {attempt.key} failed unexpectedly")
            else:
                logger.error(f"Upload of {attempt.key} failed ({kind.value}): {e!r}")
            attempt.transition_to(UploadState.COMPENSATING)
            await self._compensate(attempt)
            attempt.transition_to(UploadState.FAILED)
            return UploadResult.failure(kind, ERROR_MESSAGES[kind])

        attempt.transition_to(UploadState.PUBLISHED)
        public_url = self.storage.public_url(attempt.key)
        logger.info(
            f"File upload completed for {request.owner_id}: {attempt.key} -> {public_url} "
            f"({self.storage.backend_name})"
        )
        return UploadResult(
            success=True,
            key=attempt.key,
            public_url=public_url,
            original_name=file_meta.original_filename,
            size_bytes=file_meta.size_bytes,
            mime_type=metadata.content_type,
        )

    async def _compensate(self, attempt: UploadAttempt) -> None:
        """Best-effort removal of a partially written blob. Never raises."""
        try:
            deleted = await asyncio.wait_for(
                self.storage.delete(attempt.key),
                timeout=self.timeout_seconds,
            )
        except Exception as e:
            logger.error(f"Failed to clean up partial file {attempt.key}: {e!r}")
            return

        if deleted:
            logger.info(f"Partial file cleaned up from {self.storage.backend_name}: {attempt.key}")
        else:
            logger.info(f"No partial file left behind for {attempt.key}")

    # =========================================================================
    # Delete
    # =========================================================================

    async def delete_asset(self, key: str) -> DeleteResult:
        """
        Retire a stored asset.

        Call only after the new reference has been persisted, so a failed
        reference update never leaves the owner without an asset.

        Args:
            key: Storage key of the superseded asset

        Returns:
            DeleteResult; a missing key is reported as success with deleted=False
        """
        if not key:
            logger.error("No key provided for deletion")
            return DeleteResult(
                success=False,
                error=MediaErrorKind.VALIDATION_ERROR,
                message=INVALID_KEY_MESSAGE,
            )

        try:
            deleted = await asyncio.wait_for(self.storage.delete(key), timeout=self.timeout_seconds)
        except Exception as e:
            kind = classify_error(e)
            if kind is MediaErrorKind.UNKNOWN_ERROR:
                logger.exception(f"Failed to delete {key} from {self.storage.backend_name}")
            else:
                logger.error(f"Failed to delete {key} from {self.storage.backend_name} ({kind.value}): {e!r}")
            message = INVALID_KEY_MESSAGE if kind is MediaErrorKind.VALIDATION_ERROR else DELETE_FAILED_MESSAGE
            return DeleteResult(success=False, key=key, error=kind, message=message)

        if not deleted:
            return DeleteResult(success=True, key=key, deleted=False, message=FILE_NOT_FOUND_MESSAGE)

        logger.info(f"File deleted successfully from {self.storage.backend_name}: {key}")
        return DeleteResult(success=True, key=key, deleted=True, message="File deleted successfully")

    async def delete_asset_by_url(self, public_url: str) -> DeleteResult:
        """
        Retire a stored asset given the public URL the caller kept on record.

        Args:
            public_url: URL previously returned in UploadResult.public_url

        Returns:
            DeleteResult; URLs not built by the active backend are rejected
        """
        key = self.storage.key_from_url(public_url)
        if key is None:
            logger.warning(f"Refusing to delete foreign URL: {public_url}")
            return DeleteResult(
                success=False,
                error=MediaErrorKind.VALIDATION_ERROR,
                message=FOREIGN_URL_MESSAGE,
            )
        return await self.delete_asset(key)
