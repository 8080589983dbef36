"""Abstract base class for media storage backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from urllib.parse import unquote


@dataclass(frozen=True)
class ObjectMetadata:
    """Metadata written alongside a blob."""

    content_type: str
    original_name: str
    owner_id: str
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class StorageBackend(ABC):
    """
    Abstract base for media storage backends.

    A backend stores opaque blobs under caller-supplied keys and knows how
    to turn a key into a public URL (and back). Instances are shared across
    concurrent uploads, so implementations must not keep per-request state.
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the name of this backend (e.g., 'local', 's3')."""
        pass

    @abstractmethod
    async def put(self, key: str, content: bytes, metadata: ObjectMetadata) -> None:
        """
        Write a blob and make it servable.

        Args:
            key: Storage key, freshly generated for this write
            content: Full blob content
            metadata: Content type and provenance of the blob

        Raises:
            StorageBackendError: If the blob could not be stored or published
            OSError: Filesystem failures from the local backend
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete a blob by key.

        Args:
            key: Storage key returned from a previous put()

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """
        Check if a blob exists under the given key.

        Args:
            key: Storage key to check

        Returns:
            True if the blob exists, False otherwise
        """
        pass

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Build the public URL for a key. Deterministic, no I/O."""
        pass

    @abstractmethod
    def key_from_url(self, url: str) -> str | None:
        """
        Extract the storage key from a public URL built by this backend.

        Returns:
            The key, or None if the URL does not belong to this backend
        """
        pass

    @staticmethod
    def strip_url_prefix(url: str, prefix: str) -> str | None:
        """Return the key part of ``url`` after ``prefix``, or None."""
        if not url or not url.startswith(prefix):
            return None
        key = unquote(url[len(prefix):].split("?", 1)[0].split("#", 1)[0])
        if not key or "/" in key:
            return None
        return key
