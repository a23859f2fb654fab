"""Object storage for profile images."""

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings

logger = logging.getLogger(__name__)


class StorageService:
    """Service for profile image objects in S3-compatible storage."""

    def __init__(self):
        """Initialize without a client; it is created on first use."""
        self._client = None

    @property
    def s3_client(self):
        """Get or create the S3 client lazily."""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=settings.storage_endpoint_url,
                aws_access_key_id=settings.storage_access_key_id,
                aws_secret_access_key=settings.storage_secret_access_key,
                config=Config(
                    signature_version="s3v4",
                    s3={"addressing_style": "path"},
                ),
            )
        return self._client

    async def delete(self, path: str | None) -> bool:
        """Delete a stored object.

        Returns:
            True if the object was deleted, False if there was nothing to
            delete or storage is not configured
        """
        if not path:
            return False

        if not settings.storage_configured:
            logger.warning(f"Storage not configured, leaving object {path} in place")
            return False

        try:
            self.s3_client.delete_object(Bucket=settings.storage_bucket_name, Key=path)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete object {path}: {e}")
            return False

        logger.info(f"Deleted object {path}")
        return True


# Singleton instance
_storage_service: StorageService | None = None


def get_storage_service() -> StorageService:
    """Get the storage service singleton."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
