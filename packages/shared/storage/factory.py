"""Resolve storage configuration and create the matching backend."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from packages.shared.storage.base import StorageBackend
from packages.shared.storage.exceptions import StorageConfigurationError
from packages.shared.storage.local import LocalFileStorage

if TYPE_CHECKING:
    from apps.api.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalStorageConfig:
    """Local filesystem backend settings."""

    base_path: str
    url_prefix: str = "uploads"
    kind: Literal["local"] = "local"


@dataclass(frozen=True)
class ObjectStoreConfig:
    """S3-compatible object store settings."""

    bucket: str
    endpoint_url: str | None = None
    region: str = "us-east-1"
    access_key_id: str | None = None
    secret_access_key: str | None = None
    profile_name: str | None = None
    public_host: str | None = None
    make_public: bool = True
    kind: Literal["s3"] = "s3"


StorageConfig = LocalStorageConfig | ObjectStoreConfig


def resolve_storage_config(settings: "Settings") -> StorageConfig:
    """
    Turn the environment-level backend flag into a typed configuration.

    Args:
        settings: Application settings

    Returns:
        LocalStorageConfig or ObjectStoreConfig

    Raises:
        StorageConfigurationError: If object-store settings are incomplete
    """
    if settings.storage_backend == "s3":
        if not settings.s3_bucket:
            raise StorageConfigurationError("S3_BUCKET is required for s3 storage", backend="s3")
        if bool(settings.s3_access_key_id) != bool(settings.s3_secret_access_key):
            raise StorageConfigurationError(
                "S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY must be set together",
                backend="s3",
            )
        return ObjectStoreConfig(
            bucket=settings.s3_bucket,
            endpoint_url=settings.s3_endpoint_url,
            region=settings.s3_region,
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key,
            profile_name=settings.s3_profile,
            public_host=settings.s3_public_host,
            make_public=settings.s3_make_public,
        )

    if not settings.uploads_url_prefix.strip("/"):
        raise StorageConfigurationError("UPLOADS_URL_PREFIX must not be empty", backend="local")
    return LocalStorageConfig(
        base_path=settings.local_upload_path,
        url_prefix=settings.uploads_url_prefix,
    )


def create_storage_backend(config: StorageConfig) -> StorageBackend:
    """
    Create a storage backend from a resolved configuration.

    Args:
        config: Result of resolve_storage_config()

    Returns:
        Configured StorageBackend instance
    """
    if isinstance(config, ObjectStoreConfig):
        from packages.shared.storage.s3 import S3FileStorage

        if not (config.access_key_id or config.profile_name):
            logger.info("No explicit S3 credentials configured, using the default credential chain")
        logger.info(f"Using S3 storage with bucket: {config.bucket}")
        return S3FileStorage(
            bucket=config.bucket,
            endpoint_url=config.endpoint_url,
            region=config.region,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            profile_name=config.profile_name,
            public_host=config.public_host,
            make_public=config.make_public,
        )

    logger.info(f"Using local file storage in directory: {config.base_path}")
    return LocalFileStorage(base_path=config.base_path, url_prefix=config.url_prefix)
