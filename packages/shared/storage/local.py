"""Local disk storage backend for development and single-node deployments."""

import logging
from pathlib import Path
from urllib.parse import quote

import aiofiles
import aiofiles.os

from packages.shared.storage.base import ObjectMetadata, StorageBackend
from packages.shared.storage.exceptions import InvalidStorageKeyError

logger = logging.getLogger(__name__)


class LocalFileStorage(StorageBackend):
    """
    Local disk storage backend.

    Blobs are written flat under the root directory: <root>/<key>.
    Public URLs are relative (/<url_prefix>/<key>) and are served by the
    application's static file mount.
    """

    def __init__(self, base_path: str = "./uploads", url_prefix: str = "uploads"):
        """
        Initialize local file storage.

        The root directory is created on first write, not here.

        Args:
            base_path: Base directory for blob storage
            url_prefix: Path prefix the static file mount is served under
        """
        self.base_path = Path(base_path)
        self.url_prefix = url_prefix.strip("/")

    @property
    def backend_name(self) -> str:
        return "local"

    def _resolve(self, key: str) -> Path:
        """Map a key to a file under the root, refusing anything that escapes it."""
        if not key or key in (".", "..") or "/" in key or "\\" in key or "\x00" in key:
            raise InvalidStorageKeyError(
                "Key is not a plain file name", backend=self.backend_name, key=key
            )
        return self.base_path / key

    async def put(self, key: str, content: bytes, metadata: ObjectMetadata) -> None:
        """
        Write a blob to local disk.

        The file is opened in exclusive-create mode: keys are unique, so an
        existing file means something is wrong and it must not be clobbered.

        Args:
            key: Storage key (plain file name)
            content: Full blob content
            metadata: Content type etc. (not persisted on disk)
        """
        full_path = self._resolve(key)

        # Create root directory if needed
        await aiofiles.os.makedirs(self.base_path, exist_ok=True)

        async with aiofiles.open(full_path, "xb") as f:
            await f.write(content)

        logger.info(
            f"Saved {len(content)} bytes to local storage as {key} "
            f"(owner={metadata.owner_id}, type={metadata.content_type})"
        )

    async def delete(self, key: str) -> bool:
        """
        Delete a blob from local disk.

        Args:
            key: Storage key

        Returns:
            True if deleted, False if not found
        """
        full_path = self._resolve(key)
        try:
            await aiofiles.os.remove(full_path)
        except FileNotFoundError:
            logger.warning(f"File not found for deletion: {key}")
            return False
        return True

    async def exists(self, key: str) -> bool:
        """
        Check if a blob exists on local disk.

        Args:
            key: Storage key

        Returns:
            True if exists, False otherwise
        """
        return await aiofiles.os.path.isfile(self._resolve(key))

    def public_url(self, key: str) -> str:
        return f"/{self.url_prefix}/{quote(key, safe='')}"

    def key_from_url(self, url: str) -> str | None:
        return self.strip_url_prefix(url, f"/{self.url_prefix}/")
