"""
Object Store client

Persists original selfies and event photos and returns a public URL.
Backed by S3, with the URL served from CDN_DOMAIN when configured.
"""
import asyncio
import functools
import logging
import time
import uuid
from abc import ABC, abstractmethod
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from photospotter.core.config import settings
from photospotter.core.exceptions import ObjectStoreError

logger = logging.getLogger(__name__)

# S3 DeleteObjects accepts at most 1000 keys per call
DELETE_BATCH_SIZE = 1000

CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": "jpeg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/heic": "heic",
    "image/gif": "gif",
}


def build_object_key(content_type: str) -> str:
    """Timestamp-prefixed unique key with an extension derived from the content type."""
    extension = CONTENT_TYPE_EXTENSIONS.get(
        (content_type or "").lower(),
        (content_type or "application/octet-stream").split("/")[-1] or "bin",
    )
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}.{extension}"


class ObjectStore(ABC):
    """Binary image storage."""

    @abstractmethod
    async def put(self, data: bytes, content_type: str) -> str:
        """Store bytes and return a retrievable URL."""

    @abstractmethod
    async def delete_all(self) -> int:
        """Delete every stored object. Returns the number deleted."""


class S3ObjectStore(ObjectStore):
    """ObjectStore backed by an S3 bucket."""

    def __init__(self, bucket: str, cdn_domain: Optional[str] = None, client=None):
        """
        Initialize S3ObjectStore.

        Args:
            bucket: Bucket receiving the originals
            cdn_domain: Host serving the bucket publicly (S3 URL if None)
            client: Optional boto3 s3 client (created from settings if None)
        """
        self.bucket = bucket
        self.cdn_domain = cdn_domain
        self.client = client or boto3.client(
            "s3",
            region_name=settings.AWS_REGION,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        )

    def _public_url(self, key: str) -> str:
        if self.cdn_domain:
            return f"https://{self.cdn_domain}/{key}"
        return f"https://{self.bucket}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"

    async def _call(self, operation: str, **kwargs) -> dict:
        method = getattr(self.client, operation)
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, functools.partial(method, **kwargs))
        except (ClientError, BotoCoreError) as e:
            logger.error(
                f"S3 {operation} failed: {e}",
                extra={
                    "event_type": "object_store_error",
                    "operation": operation,
                    "bucket": self.bucket,
                    "error_type": type(e).__name__,
                }
            )
            raise ObjectStoreError(
                f"S3 {operation} failed",
                details={"bucket": self.bucket, "operation": operation},
            ) from e

    async def put(self, data: bytes, content_type: str) -> str:
        key = build_object_key(content_type)
        await self._call(
            "put_object",
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
        )
        url = self._public_url(key)
        logger.info(
            "Stored object",
            extra={
                "event_type": "object_stored",
                "bucket": self.bucket,
                "key": key,
                "size_bytes": len(data),
            }
        )
        return url

    async def delete_all(self) -> int:
        deleted = 0
        continuation_token = None
        while True:
            kwargs = {"Bucket": self.bucket}
            if continuation_token:
                kwargs["ContinuationToken"] = continuation_token
            listing = await self._call("list_objects_v2", **kwargs)
            keys = [obj["Key"] for obj in listing.get("Contents") or []]

            for i in range(0, len(keys), DELETE_BATCH_SIZE):
                batch = keys[i:i + DELETE_BATCH_SIZE]
                await self._call(
                    "delete_objects",
                    Bucket=self.bucket,
                    Delete={"Objects": [{"Key": key} for key in batch]},
                )
                deleted += len(batch)

            if not listing.get("IsTruncated"):
                break
            continuation_token = listing.get("NextContinuationToken")

        logger.info(
            f"Deleted {deleted} objects from bucket",
            extra={"event_type": "object_store_emptied", "bucket": self.bucket, "deleted": deleted}
        )
        return deleted


# Global singleton instance
_object_store: Optional[ObjectStore] = None


def get_object_store() -> ObjectStore:
    """Get the global ObjectStore instance (FastAPI dependency)."""
    global _object_store

    if _object_store is None:
        _object_store = S3ObjectStore(settings.S3_BUCKET_ORIGINALS, settings.CDN_DOMAIN)
        logger.info(
            "Global ObjectStore instance created",
            extra={"event_type": "object_store_singleton_created", "bucket": settings.S3_BUCKET_ORIGINALS}
        )

    return _object_store
