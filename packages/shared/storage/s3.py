"""S3-compatible object storage backend for production."""

import logging
from urllib.parse import quote, urlparse

import aioboto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    PartialCredentialsError,
    ReadTimeoutError,
)
from botocore.exceptions import ConnectionError as BotoConnectionError

from packages.shared.storage.base import ObjectMetadata, StorageBackend
from packages.shared.storage.exceptions import (
    ObjectPublishError,
    StorageBackendError,
    StorageNetworkError,
    StoragePermissionError,
    StorageTimeoutError,
    StorageWriteError,
)

logger = logging.getLogger(__name__)

# S3 error codes that mean "your credentials can't do this"
PERMISSION_ERROR_CODES = {
    "403",
    "AccessDenied",
    "AccountProblem",
    "AllAccessDisabled",
    "Forbidden",
    "InvalidAccessKeyId",
    "InvalidToken",
    "SignatureDoesNotMatch",
}

NOT_FOUND_ERROR_CODES = {"404", "NoSuchKey", "NotFound"}

TIMEOUT_ERROR_CODES = {"RequestTimeout", "RequestTimeTooSkewed"}


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3FileStorage(StorageBackend):
    """
    S3-compatible object storage backend.

    Supports AWS S3, MinIO and the GCS XML interoperability endpoint (via
    endpoint_url). Blobs are stored flat in the bucket under their key and
    served from https://<public_host>/<bucket>/<key>.

    put() is two-phase: the object is written first, then made publicly
    readable with an explicit ACL call. A failure in the second phase
    leaves an unservable object behind and is reported as ObjectPublishError.
    """

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None = None,
        region: str = "us-east-1",
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        profile_name: str | None = None,
        public_host: str | None = None,
        make_public: bool = True,
        session: aioboto3.Session | None = None,
    ):
        """
        Initialize S3 storage.

        Args:
            bucket: Bucket name
            endpoint_url: Custom endpoint URL (MinIO, GCS interop); None for AWS S3
            region: AWS region
            aws_access_key_id: Access key (optional, uses env/IAM/profile if not set)
            aws_secret_access_key: Secret key (optional, uses env/IAM/profile if not set)
            profile_name: Named profile from the shared credentials file
            public_host: Host used in public URLs (derived from endpoint/region if unset)
            make_public: Apply a public-read ACL after writing
            session: Pre-built aioboto3 session (tests, shared sessions)
        """
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.region = region
        self.aws_access_key_id = aws_access_key_id
        self.aws_secret_access_key = aws_secret_access_key
        self.make_public = make_public
        self.public_host = public_host or self._default_public_host()
        if session is None:
            session = aioboto3.Session(profile_name=profile_name) if profile_name else aioboto3.Session()
        self._session = session

    @property
    def backend_name(self) -> str:
        return "s3"

    def _default_public_host(self) -> str:
        if self.endpoint_url:
            return urlparse(self.endpoint_url).netloc or self.endpoint_url
        return f"s3.{self.region}.amazonaws.com"

    def _get_client_kwargs(self) -> dict:
        """Build kwargs for S3 client."""
        kwargs = {
            "region_name": self.region,
        }
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        if self.aws_access_key_id and self.aws_secret_access_key:
            kwargs["aws_access_key_id"] = self.aws_access_key_id
            kwargs["aws_secret_access_key"] = self.aws_secret_access_key
        return kwargs

    def _translate_error(
        self,
        error: Exception,
        action: str,
        key: str,
        error_cls: type[StorageBackendError] = StorageWriteError,
    ) -> StorageBackendError:
        """Map a botocore exception onto the storage error taxonomy."""
        detail = f"Failed to {action}: {error}"
        if isinstance(error, (ReadTimeoutError, ConnectTimeoutError)):
            return StorageTimeoutError(detail, backend=self.backend_name, key=key)
        if isinstance(error, (EndpointConnectionError, BotoConnectionError)):
            return StorageNetworkError(detail, backend=self.backend_name, key=key)
        if isinstance(error, (NoCredentialsError, PartialCredentialsError)):
            return StoragePermissionError(detail, backend=self.backend_name, key=key)
        if isinstance(error, ClientError):
            code = _error_code(error)
            if code in PERMISSION_ERROR_CODES:
                return StoragePermissionError(detail, backend=self.backend_name, key=key)
            if code in TIMEOUT_ERROR_CODES:
                return StorageTimeoutError(detail, backend=self.backend_name, key=key)
        return error_cls(detail, backend=self.backend_name, key=key)

    async def put(self, key: str, content: bytes, metadata: ObjectMetadata) -> None:
        """
        Write a blob to S3 and make it public.

        Args:
            key: Object key
            content: Full blob content
            metadata: Content type and provenance, stored as object metadata

        Raises:
            ObjectPublishError: Written, but the public-read ACL could not be applied
            StorageBackendError: Any other failure, already classified
        """
        async with self._session.client("s3", **self._get_client_kwargs()) as s3:
            try:
                await s3.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=content,
                    ContentType=metadata.content_type,
                    Metadata={
                        # S3 user metadata must be ASCII
                        "original-name": quote(metadata.original_name),
                        "uploaded-by": quote(metadata.owner_id),
                        "uploaded-at": metadata.uploaded_at.isoformat(),
                    },
                )
            except (BotoCoreError, ClientError) as e:
                raise self._translate_error(e, "write object", key) from e

            if not self.make_public:
                return

            try:
                await s3.put_object_acl(Bucket=self.bucket, Key=key, ACL="public-read")
            except (BotoCoreError, ClientError) as e:
                logger.error(f"Failed to make {key} public in bucket {self.bucket}: {e}")
                raise self._translate_error(
                    e, "make object public", key, error_cls=ObjectPublishError
                ) from e

        logger.info(f"Uploaded {len(content)} bytes to s3://{self.bucket}/{key}")

    async def delete(self, key: str) -> bool:
        """
        Delete a blob from S3.

        Args:
            key: Object key

        Returns:
            True if deleted. S3 reports success for missing keys; endpoints
            that answer 404 instead (GCS interop) yield False.
        """
        async with self._session.client("s3", **self._get_client_kwargs()) as s3:
            try:
                await s3.delete_object(Bucket=self.bucket, Key=key)
            except ClientError as e:
                if _error_code(e) in NOT_FOUND_ERROR_CODES:
                    logger.warning(f"Object not found for deletion: {key}")
                    return False
                raise self._translate_error(e, "delete object", key) from e
            except BotoCoreError as e:
                raise self._translate_error(e, "delete object", key) from e
        return True

    async def exists(self, key: str) -> bool:
        """
        Check if a blob exists in S3.

        Args:
            key: Object key

        Returns:
            True if exists, False otherwise
        """
        async with self._session.client("s3", **self._get_client_kwargs()) as s3:
            try:
                await s3.head_object(Bucket=self.bucket, Key=key)
                return True
            except ClientError as e:
                if _error_code(e) in NOT_FOUND_ERROR_CODES:
                    return False
                raise self._translate_error(e, "check object", key) from e
            except BotoCoreError as e:
                raise self._translate_error(e, "check object", key) from e

    def public_url(self, key: str) -> str:
        return f"https://{self.public_host}/{self.bucket}/{quote(key, safe='')}"

    def key_from_url(self, url: str) -> str | None:
        return self.strip_url_prefix(url, f"https://{self.public_host}/{self.bucket}/")
