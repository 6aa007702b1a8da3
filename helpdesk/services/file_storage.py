"""
Storage service for attachment files.

Handles:
- Writing uploaded bytes to S3-compatible storage (or local disk)
- Presigned download URLs (S3) or filesystem paths (local) for download
- File deletion
- MIME type detection

The backend is chosen by ``storage_backend``: ``s3`` talks to any
S3-compatible service through aiobotocore (MinIO in development), ``local``
keeps files under ``upload_dir`` for single-host and test setups.
"""

import asyncio
import logging
import mimetypes
from contextlib import asynccontextmanager
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from botocore.exceptions import BotoCoreError, ClientError

from helpdesk.config import Settings, get_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

_S3_ERRORS = (BotoCoreError, ClientError)


class FileStorageService:
    """Service for attachment file storage."""

    def __init__(self, settings: Settings | None = None):
        """
        Initialize file storage service.

        Args:
            settings: Application settings with the storage configuration.
                     Uses get_settings() if not provided.
        """
        self.settings = settings or get_settings()
        self.root = Path(self.settings.upload_dir).resolve()

    @property
    def is_local(self) -> bool:
        return self.settings.storage_backend == "local"

    @asynccontextmanager
    async def get_client(self) -> "AsyncGenerator[Any, None]":
        """
        Get S3 client context manager.

        Yields:
            Async S3 client from aiobotocore

        Raises:
            RuntimeError: If S3 credentials are not configured
        """
        if not self.settings.s3_configured:
            raise RuntimeError(
                "S3 storage not configured. "
                "Set HELPDESK_S3_ACCESS_KEY and HELPDESK_S3_SECRET_KEY, "
                "or HELPDESK_STORAGE_BACKEND=local."
            )

        from aiobotocore.session import get_session

        session = get_session()
        async with session.create_client(
            "s3",
            endpoint_url=self.settings.s3_endpoint,
            aws_access_key_id=self.settings.s3_access_key,
            aws_secret_access_key=self.settings.s3_secret_key,
            region_name=self.settings.s3_region,
        ) as client:
            yield client

    @staticmethod
    def guess_content_type(filename: str) -> str:
        """
        Guess content type from filename.

        Args:
            filename: File name with extension

        Returns:
            MIME type string (defaults to 'application/octet-stream' if unknown)
        """
        content_type, _ = mimetypes.guess_type(filename)
        return content_type or "application/octet-stream"

    def generate_key(self, organization_id: int, filename: str) -> str:
        """
        Generate a unique storage key for an attachment.

        Format: {org_id}/{random}/{filename}

        Args:
            organization_id: Organization ID
            filename: Original filename (directory parts are dropped)

        Returns:
            Relative storage key
        """
        safe_name = PurePath(filename).name or "upload"
        return f"{organization_id}/{uuid4().hex}/{safe_name}"

    def path_for(self, key: str) -> Path:
        """
        Resolve a storage key to a path inside the upload directory (local backend).

        Raises:
            ValueError: If the key escapes the upload directory
        """
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root):
            raise ValueError("Storage key outside upload directory")
        return path

    async def save(
        self,
        key: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> bool:
        """
        Store file content.

        Args:
            key: Storage key from generate_key
            content: File content as bytes
            content_type: MIME type of the content

        Returns:
            True if the file was stored
        """
        if self.is_local:
            path = self.path_for(key)

            def _write() -> None:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(content)

            await asyncio.to_thread(_write)
        else:
            try:
                async with self.get_client() as s3:
                    await s3.put_object(
                        Bucket=self.settings.s3_bucket,
                        Key=key,
                        Body=content,
                        ContentType=content_type,
                    )
            except _S3_ERRORS as e:
                logger.error(f"Failed to upload file to S3: {key}, error: {e}")
                return False

        logger.info(f"Stored attachment file: {key} ({len(content)} bytes)")
        return True

    async def exists(self, key: str) -> bool:
        if self.is_local:
            return await asyncio.to_thread(self.path_for(key).is_file)

        try:
            async with self.get_client() as s3:
                await s3.head_object(Bucket=self.settings.s3_bucket, Key=key)
        except _S3_ERRORS:
            return False
        return True

    async def download_url(self, key: str, filename: str | None = None) -> str:
        """
        Generate a presigned GET URL for an S3-stored file.

        Args:
            key: Storage key
            filename: Original filename for the Content-Disposition header

        Returns:
            Presigned URL valid for s3_download_url_expiry seconds
        """
        params: dict[str, Any] = {"Bucket": self.settings.s3_bucket, "Key": key}
        if filename:
            params["ResponseContentDisposition"] = f'attachment; filename="{filename}"'

        async with self.get_client() as s3:
            url: str = await s3.generate_presigned_url(
                "get_object",
                Params=params,
                ExpiresIn=self.settings.s3_download_url_expiry,
            )
        return url

    async def delete(self, key: str) -> bool:
        """
        Delete a stored file.

        Args:
            key: Storage key

        Returns:
            True if a file was removed
        """
        if self.is_local:
            try:
                await asyncio.to_thread(self.path_for(key).unlink)
            except FileNotFoundError:
                logger.warning(f"Attachment file already missing: {key}")
                return False
        else:
            try:
                async with self.get_client() as s3:
                    await s3.delete_object(Bucket=self.settings.s3_bucket, Key=key)
            except _S3_ERRORS as e:
                logger.error(f"Failed to delete file from S3: {key}, error: {e}")
                return False

        logger.info(f"Deleted attachment file: {key}")
        return True


# Module-level singleton for convenience
_file_storage_service: FileStorageService | None = None


def get_file_storage_service() -> FileStorageService:
    """
    Get the file storage service singleton.

    Returns:
        FileStorageService instance
    """
    global _file_storage_service
    if _file_storage_service is None:
        _file_storage_service = FileStorageService()
    return _file_storage_service


def reset_file_storage_service() -> None:
    """Reset the file storage service (for testing)."""
    global _file_storage_service
    _file_storage_service = None
