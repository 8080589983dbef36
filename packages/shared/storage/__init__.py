"""
Media storage backends.

Provides abstract interface and implementations for:
- Local disk storage (development, single node)
- S3-compatible object storage (production)
"""

from packages.shared.storage.base import ObjectMetadata, StorageBackend
from packages.shared.storage.exceptions import (
    InvalidStorageKeyError,
    ObjectPublishError,
    StorageBackendError,
    StorageConfigurationError,
    StorageNetworkError,
    StoragePermissionError,
    StorageTimeoutError,
    StorageWriteError,
)
from packages.shared.storage.factory import (
    LocalStorageConfig,
    ObjectStoreConfig,
    StorageConfig,
    create_storage_backend,
    resolve_storage_config,
)
from packages.shared.storage.local import LocalFileStorage
from packages.shared.storage.s3 import S3FileStorage

__all__ = [
    "InvalidStorageKeyError",
    "LocalFileStorage",
    "LocalStorageConfig",
    "ObjectMetadata",
    "ObjectPublishError",
    "ObjectStoreConfig",
    "S3FileStorage",
    "StorageBackend",
    "StorageBackendError",
    "StorageConfig",
    "StorageConfigurationError",
    "StorageNetworkError",
    "StoragePermissionError",
    "StorageTimeoutError",
    "StorageWriteError",
    "create_storage_backend",
    "resolve_storage_config",
]
