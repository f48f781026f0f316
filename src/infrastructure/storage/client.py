"""
Object storage client for video files.

Supports AWS S3 and S3-compatible stores (Cloudflare R2, MinIO) through
boto3, plus an in-memory mock for local development.

The API server never moves video bytes itself. It only mints presigned
URLs: PUT for the admin's browser upload, GET for public playback. The
one direct call it makes against stored objects is delete (and, when
upload verification is on, a HEAD).
"""

import asyncio
import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import parse_qs, quote, unquote, urlencode, urlsplit

from src.core.catalog.interfaces import ObjectStorage

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


@dataclass
class StorageConfig:
    """
    Configuration for S3-compatible storage.

    `endpoint_url` is only needed for non-AWS providers; for R2 it looks
    like https://{account_id}.r2.cloudflarestorage.com and region is 'auto'.
    """
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None


class S3StorageClient:
    """
    S3 / R2 object storage client.

    Presigning is a local computation in boto3 and is done inline. Delete
    and HEAD are network calls on a synchronous client, so they run in a
    worker thread to keep the event loop free.
    """

    def __init__(self, config: StorageConfig) -> None:
        """
        Initialize the boto3 client.

        boto3 is imported here (not at module level) because mock mode
        doesn't need it.
        """
        try:
            import boto3
            from botocore.config import Config
        except ImportError:
            raise ImportError(
                "boto3 is required for S3 storage. Install with: pip install boto3"
            )

        self._config = config

        # Presigned URLs must be SigV4; R2 also needs path-style addressing
        boto_config = Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path' if config.endpoint_url else 'auto'},
        )

        self._s3_client = boto3.client(
            's3',
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id or None,
            aws_secret_access_key=config.secret_access_key or None,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized S3 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url or "aws",
            }
        )

    async def presign_upload(
        self,
        storage_key: str,
        content_type: str,
        expiry_seconds: int,
    ) -> str:
        """
        Generate a presigned PUT URL.

        ContentType and ACL are part of the signature, so the browser must
        send the same Content-Type header and the object stays private.
        """
        try:
            return self._s3_client.generate_presigned_url(
                'put_object',
                Params={
                    'Bucket': self._config.bucket_name,
                    'Key': storage_key,
                    'ContentType': content_type,
                    'ACL': 'private',
                },
                ExpiresIn=expiry_seconds,
            )
        except Exception as e:
            logger.error(
                "Failed to generate presigned upload URL",
                extra={"storage_key": storage_key, "error": str(e)}
            )
            raise StorageError(f"Presigned upload URL generation failed: {e}")

    async def presign_download(
        self,
        storage_key: str,
        expiry_seconds: int,
    ) -> str:
        """Generate a presigned GET URL for streaming."""
        try:
            return self._s3_client.generate_presigned_url(
                'get_object',
                Params={
                    'Bucket': self._config.bucket_name,
                    'Key': storage_key,
                },
                ExpiresIn=expiry_seconds,
            )
        except Exception as e:
            logger.error(
                "Failed to generate presigned URL",
                extra={"storage_key": storage_key, "error": str(e)}
            )
            raise StorageError(f"Presigned URL generation failed: {e}")

    async def delete_object(self, storage_key: str) -> None:
        try:
            await asyncio.to_thread(
                self._s3_client.delete_object,
                Bucket=self._config.bucket_name,
                Key=storage_key,
            )
            logger.info("Deleted object", extra={"storage_key": storage_key})
        except Exception as e:
            logger.error(
                "Failed to delete object",
                extra={"storage_key": storage_key, "error": str(e)}
            )
            raise StorageError(f"Delete failed: {e}")

    async def object_exists(self, storage_key: str) -> bool:
        from botocore.exceptions import ClientError

        try:
            await asyncio.to_thread(
                self._s3_client.head_object,
                Bucket=self._config.bucket_name,
                Key=storage_key,
            )
            return True
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code', '')
            if code in ('404', 'NoSuchKey', 'NotFound'):
                return False
            logger.error(
                "Failed to check object",
                extra={"storage_key": storage_key, "error": str(e)}
            )
            raise StorageError(f"Head object failed: {e}")
        except Exception as e:
            logger.error(
                "Failed to check object",
                extra={"storage_key": storage_key, "error": str(e)}
            )
            raise StorageError(f"Head object failed: {e}")


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockStorageClient:
    """
    In-memory storage for local development and tests.

    Issues signed `mock://` URLs that behave like presigned ones: `put`
    and `fetch` accept a URL only if its signature matches and it has not
    expired. Expiry is checked against an injectable clock with no skew
    allowance: a URL is good while now <= expires.
    """

    def __init__(
        self,
        bucket_name: str = "mock-bucket",
        clock: Callable[[], float] = time.time,
    ) -> None:
        # {storage_key: (content_type, bytes)}
        self._objects: dict[str, tuple[str, bytes]] = {}
        self._bucket = bucket_name
        self._clock = clock
        self._signing_key = b"mock-storage-signing-key"
        logger.info("Initialized mock storage client (in-memory)")

    # -- presigning ---------------------------------------------------------

    def _sign(self, method: str, storage_key: str, expires: int, content_type: str) -> str:
        payload = f"{method}\n{self._bucket}\n{storage_key}\n{expires}\n{content_type}"
        return hmac.new(self._signing_key, payload.encode("utf-8"), hashlib.sha256).hexdigest()

    def _build_url(self, method: str, storage_key: str, expiry_seconds: int, content_type: str = "") -> str:
        expires = int(self._clock()) + expiry_seconds
        params = {"method": method, "expires": str(expires)}
        if content_type:
            params["content-type"] = content_type
        params["signature"] = self._sign(method, storage_key, expires, content_type)
        return f"mock://storage/{self._bucket}/{quote(storage_key)}?{urlencode(params)}"

    async def presign_upload(
        self,
        storage_key: str,
        content_type: str,
        expiry_seconds: int,
    ) -> str:
        return self._build_url("PUT", storage_key, expiry_seconds, content_type)

    async def presign_download(
        self,
        storage_key: str,
        expiry_seconds: int,
    ) -> str:
        return self._build_url("GET", storage_key, expiry_seconds)

    async def delete_object(self, storage_key: str) -> None:
        self._objects.pop(storage_key, None)
        logger.debug("Deleted object from mock storage", extra={"storage_key": storage_key})

    async def object_exists(self, storage_key: str) -> bool:
        return storage_key in self._objects

    # -- URL consumers (what a browser would do) -----------------------------

    def _verify(self, url: str, method: str) -> tuple[str, str]:
        parts = urlsplit(url)
        prefix = f"/{self._bucket}/"
        if parts.scheme != "mock" or parts.netloc != "storage" or not parts.path.startswith(prefix):
            raise StorageError("Not a mock storage URL")

        storage_key = unquote(parts.path[len(prefix):])
        query = {k: v[0] for k, v in parse_qs(parts.query).items()}

        if query.get("method") != method:
            raise StorageError(f"URL was not signed for {method}")

        try:
            expires = int(query["expires"])
        except (KeyError, ValueError):
            raise StorageError("URL is missing its expiry")

        content_type = query.get("content-type", "")
        expected = self._sign(method, storage_key, expires, content_type)
        if not hmac.compare_digest(expected, query.get("signature", "")):
            raise StorageError("Signature mismatch")

        if self._clock() > expires:
            raise StorageError("Request has expired")

        return storage_key, content_type

    def put(self, url: str, data: bytes, content_type: str) -> str:
        """Upload through a presigned PUT URL. Returns the storage key."""
        storage_key, signed_type = self._verify(url, "PUT")
        if content_type != signed_type:
            raise StorageError("Content-Type does not match the signed value")
        self._objects[storage_key] = (content_type, data)
        return storage_key

    def fetch(self, url: str) -> bytes:
        """Download through a presigned GET URL."""
        storage_key, _ = self._verify(url, "GET")
        if storage_key not in self._objects:
            raise StorageError(f"Object not found: {storage_key}")
        return self._objects[storage_key][1]

    def keys(self) -> list[str]:
        """Stored keys (for test assertions)."""
        return sorted(self._objects)


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> ObjectStorage:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return mock client for testing

    Returns:
        ObjectStorage implementation (S3 or Mock)
    """
    if mock_mode:
        return MockStorageClient(bucket_name=config.bucket_name if config else "mock-bucket")

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3StorageClient(config)
