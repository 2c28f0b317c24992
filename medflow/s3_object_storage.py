"""S3-compatible object storage for uploaded DICOM/Excel/PDF artifacts."""

from typing import Generator, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, NoCredentialsError
from pydantic import BaseModel

from medflow.storage_exceptions import ObjectNotFound
from medflow.structlog_config import get_logger

logger = get_logger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


def _is_not_found(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES


class S3Config(BaseModel):
    """Configuration for S3 object storage."""

    bucket_name: str
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None
    # None lets boto3 fall back to its credential chain (env, profile, IAM role)
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None

    # Streaming configuration
    chunk_size: int = 64 * 1024

    # Connection pooling
    max_pool_connections: int = 10


class StoredObject:
    """An object opened for download; ``body`` is consumed once."""

    def __init__(
        self,
        key: str,
        body,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
        chunk_size: int = 64 * 1024,
    ):
        self.key = key
        self.body = body
        self.content_type = content_type or "application/octet-stream"
        self.content_length = content_length
        self.chunk_size = chunk_size

    def iter_chunks(self) -> Generator[bytes, None, None]:
        """Stream the body in chunks, closing it when exhausted."""
        try:
            while True:
                chunk = self.body.read(self.chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            self.close()

    def close(self) -> None:
        """Release the underlying connection. Safe to call more than once."""
        self.body.close()


class S3ObjectStorage:
    """Signed URLs and streaming downloads for objects in one bucket."""

    def __init__(self, config: S3Config):
        self.config = config
        self._client = None

    @property
    def client(self):
        """Lazy initialization of S3 client with connection pooling."""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.config.endpoint_url,
                aws_access_key_id=self.config.access_key_id,
                aws_secret_access_key=self.config.secret_access_key,
                region_name=self.config.region,
                config=Config(
                    max_pool_connections=self.config.max_pool_connections,
                    signature_version="s3v4",
                ),
            )
        return self._client

    def exists(self, key: str) -> bool:
        """Check if an object exists in S3."""
        try:
            self.client.head_object(Bucket=self.config.bucket_name, Key=key)
            return True
        except ClientError as e:
            if _is_not_found(e):
                return False
            logger.error(
                "Error checking S3 object existence",
                provider_type="s3",
                operation="exists",
                error_type="existence_check_failed",
                s3_key=key,
                bucket_name=self.config.bucket_name,
                error=str(e),
            )
            raise

    def generate_download_url(
        self, key: str, expires_in: int, require_exists: bool = True
    ) -> str:
        """
        Create a presigned GET URL for ``key`` valid for ``expires_in`` seconds.

        Raises:
            ObjectNotFound: if ``require_exists`` and the object is missing.
        """
        if require_exists and not self.exists(key):
            logger.warning(
                "S3 object not found for signed URL",
                provider_type="s3",
                operation="generate_download_url",
                error_type="not_found",
                s3_key=key,
                bucket_name=self.config.bucket_name,
            )
            raise ObjectNotFound(key)

        try:
            url = self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.config.bucket_name, "Key": key},
                ExpiresIn=expires_in,
            )
        except (ClientError, NoCredentialsError) as e:
            logger.error(
                "Failed to presign S3 object",
                provider_type="s3",
                operation="generate_download_url",
                error_type="presign_failed",
                s3_key=key,
                bucket_name=self.config.bucket_name,
                error=str(e),
            )
            raise

        logger.info(
            "Issued signed download URL",
            provider_type="s3",
            operation="generate_download_url",
            s3_key=key,
            expires_in=expires_in,
        )
        return url

    def open_object(self, key: str) -> StoredObject:
        """
        Open an object for streaming.

        Raises:
            ObjectNotFound: if the object does not exist.
        """
        try:
            response = self.client.get_object(Bucket=self.config.bucket_name, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                logger.warning(
                    "S3 object not found for streaming",
                    provider_type="s3",
                    operation="open_object",
                    error_type="not_found",
                    s3_key=key,
                    bucket_name=self.config.bucket_name,
                )
                raise ObjectNotFound(key) from e
            logger.error(
                "Failed to open S3 object",
                provider_type="s3",
                operation="open_object",
                error_type="stream_failed",
                s3_key=key,
                bucket_name=self.config.bucket_name,
                error=str(e),
            )
            raise

        return StoredObject(
            key=key,
            body=response["Body"],
            content_type=response.get("ContentType"),
            content_length=response.get("ContentLength"),
            chunk_size=self.config.chunk_size,
        )
