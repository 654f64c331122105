"""
carejourney/services/storage_service.py

Purpose: Object storage for uploaded images

- Async S3 client via aioboto3 (AWS S3 or any S3 compatible endpoint)
- Put objects with content type and uploader metadata
- Delete replaced/removed objects (best effort once the record is written)
- Builds public URLs for stored objects
"""

from functools import lru_cache
from typing import Dict, Optional

import aioboto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from carejourney.core.config import settings
from carejourney.core.exceptions import ExternalServiceError
from carejourney.core.logging import get_logger
from carejourney.utils.time_utils import epoch_millis

logger = get_logger(__name__)


def build_object_key(user_id: str, kind: str) -> str:
    """
    Object key for a new upload: <userId>/<kind>-<epoch ms>.
    """
    return f"{user_id}/{kind}-{epoch_millis()}"


class StorageService:
    """
    Service class wrapping an S3 bucket.
    Returns stored images as {"url", "publicId"} where publicId is the object key.
    """

    def __init__(
        self,
        bucket: str,
        region: str,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_url: Optional[str] = None,
    ):
        self.bucket = bucket
        self.region = region
        self.access_key = access_key
        self.secret_key = secret_key
        self.endpoint_url = endpoint_url
        self.public_url = public_url

        self.config = Config(
            max_pool_connections=20,
            retries={
                "max_attempts": 3,
                "mode": "adaptive"
            }
        )
        self.session = aioboto3.Session()

    def get_client(self):
        """
        Get an async S3 client context manager.

        Usage:
            async with storage.get_client() as s3:
                await s3.put_object(...)
        """
        return self.session.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            region_name=self.region,
            config=self.config
        )

    def object_url(self, key: str) -> str:
        """Public URL of a stored object."""
        if self.public_url:
            return f"{self.public_url.rstrip('/')}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def upload_image(
        self,
        key: str,
        data: bytes,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> Dict[str, str]:
        """
        Put an image into the bucket.

        Args:
            key: Object key (see build_object_key)
            data: File content
            content_type: MIME type stored with the object
            metadata: Extra object metadata (e.g. uploadedBy)

        Returns:
            {"url": public URL, "publicId": object key}

        Raises:
            ExternalServiceError: If the upload fails
        """
        try:
            async with self.get_client() as s3:
                await s3.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=data,
                    ContentType=content_type,
                    Metadata=metadata or {}
                )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Object upload failed for {key}: {e}")
            raise ExternalServiceError("Failed to upload the file") from e

        logger.info(f"Uploaded {key} ({len(data)} bytes)")
        return {"url": self.object_url(key), "publicId": key}

    async def delete_object(self, key: str) -> None:
        """
        Delete an object from the bucket.

        Raises:
            ExternalServiceError: If the delete fails
        """
        try:
            async with self.get_client() as s3:
                await s3.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting object {key} from storage: {e}")
            raise ExternalServiceError("Failed to delete the file") from e

        logger.info(f"Deleted {key}")



async def discard_object(storage: StorageService, key: Optional[str]) -> None:
    """
    Deletes an object whose record no longer references it.
    A failed delete only leaves an orphaned object, so it is logged, not raised.
    """
    if not key:
        return
    try:
        await storage.delete_object(key)
    except ExternalServiceError:
        logger.warning(f"Orphaned object left in storage: {key}")


@lru_cache()
def get_storage_service() -> StorageService:
    """Shared storage service built from settings."""
    return StorageService(
        bucket=settings.S3_BUCKET_NAME,
        region=settings.S3_REGION,
        access_key=settings.S3_ACCESS_KEY,
        secret_key=settings.S3_SECRET_KEY,
        endpoint_url=settings.S3_ENDPOINT_URL,
        public_url=settings.S3_PUBLIC_URL,
    )
