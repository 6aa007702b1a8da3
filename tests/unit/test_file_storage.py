"""
Unit tests for file storage service.

The local backend uses a temporary upload directory; the S3 backend runs
against an in-memory stand-in for the aiobotocore client.
"""

from contextlib import asynccontextmanager
from unittest.mock import MagicMock

import pytest

from helpdesk.services.file_storage import (
    FileStorageService,
    get_file_storage_service,
    reset_file_storage_service,
)


@pytest.fixture(autouse=True)
def reset_service():
    """Reset file storage service singleton before each test."""
    reset_file_storage_service()
    yield
    reset_file_storage_service()


@pytest.fixture
def file_storage_service(tmp_path):
    """Create a local-disk file storage service rooted in a temp directory."""
    settings = MagicMock()
    settings.storage_backend = "local"
    settings.upload_dir = str(tmp_path / "uploads")
    return FileStorageService(settings=settings)


@pytest.fixture
def s3_storage_service(tmp_path, s3_client):
    """Create an S3-backed file storage service wired to the fake client."""
    settings = MagicMock()
    settings.storage_backend = "s3"
    settings.upload_dir = str(tmp_path / "unused")
    settings.s3_bucket = "attachments"
    settings.s3_download_url_expiry = 60
    service = FileStorageService(settings=settings)

    @asynccontextmanager
    async def fake_client():
        yield s3_client

    service.get_client = fake_client
    return service


@pytest.mark.unit
class TestFileStorageService:
    """Tests for FileStorageService."""

    def test_guess_content_type(self):
        """Test MIME type guessing."""
        assert FileStorageService.guess_content_type("document.pdf") == "application/pdf"
        assert FileStorageService.guess_content_type("image.png") == "image/png"
        assert FileStorageService.guess_content_type("notes.txt") == "text/plain"
        assert (
            FileStorageService.guess_content_type("file.unknown") == "application/octet-stream"
        )

    def test_generate_key_format(self, file_storage_service):
        key = file_storage_service.generate_key(12, "report.pdf")
        org, token, name = key.split("/")

        assert org == "12"
        assert len(token) == 32
        assert name == "report.pdf"

    def test_generate_key_drops_directories(self, file_storage_service):
        key = file_storage_service.generate_key(1, "../../etc/passwd")
        assert key.endswith("/passwd")
        assert ".." not in key

    def test_generate_key_is_unique(self, file_storage_service):
        assert file_storage_service.generate_key(1, "a.txt") != file_storage_service.generate_key(
            1, "a.txt"
        )

    def test_singleton(self, test_settings):
        service = get_file_storage_service()
        assert get_file_storage_service() is service

        reset_file_storage_service()
        assert get_file_storage_service() is not service


@pytest.mark.unit
class TestLocalBackend:
    """Local disk fallback."""

    def test_is_local(self, file_storage_service):
        assert file_storage_service.is_local

    def test_path_for_rejects_escaping_keys(self, file_storage_service):
        with pytest.raises(ValueError):
            file_storage_service.path_for("../outside.txt")

    async def test_save_exists_delete(self, file_storage_service):
        key = file_storage_service.generate_key(1, "hello.txt")

        assert await file_storage_service.save(key, b"hello") is True
        assert await file_storage_service.exists(key)
        assert file_storage_service.path_for(key).read_bytes() == b"hello"

        assert await file_storage_service.delete(key) is True
        assert not await file_storage_service.exists(key)

    async def test_delete_missing_file(self, file_storage_service):
        assert await file_storage_service.delete("1/missing/file.txt") is False


@pytest.mark.unit
class TestS3Backend:
    """S3 backend through the aiobotocore client interface."""

    def test_is_not_local(self, s3_storage_service):
        assert not s3_storage_service.is_local

    async def test_save_puts_object_with_content_type(self, s3_storage_service, s3_client):
        assert await s3_storage_service.save("1/abc/report.pdf", b"%PDF", "application/pdf")
        assert s3_client.objects[("attachments", "1/abc/report.pdf")] == (
            b"%PDF",
            "application/pdf",
        )

    async def test_save_failure_returns_false(self, s3_storage_service, s3_client):
        s3_client.fail_writes = True
        assert await s3_storage_service.save("1/abc/report.pdf", b"%PDF") is False

    async def test_exists_uses_head_object(self, s3_storage_service):
        assert not await s3_storage_service.exists("1/abc/notes.txt")
        await s3_storage_service.save("1/abc/notes.txt", b"hi", "text/plain")
        assert await s3_storage_service.exists("1/abc/notes.txt")

    async def test_delete_removes_object(self, s3_storage_service, s3_client):
        await s3_storage_service.save("1/abc/notes.txt", b"hi", "text/plain")
        assert await s3_storage_service.delete("1/abc/notes.txt") is True
        assert s3_client.objects == {}

    async def test_download_url_is_presigned_get(self, s3_storage_service):
        url = await s3_storage_service.download_url("1/abc/notes.txt", "notes.txt")
        assert url == "https://s3.test/attachments/1/abc/notes.txt?op=get_object&ttl=60"

    async def test_client_requires_credentials(self, tmp_path):
        settings = MagicMock()
        settings.storage_backend = "s3"
        settings.upload_dir = str(tmp_path)
        settings.s3_configured = False
        service = FileStorageService(settings=settings)

        with pytest.raises(RuntimeError, match="S3 storage not configured"):
            async with service.get_client():
                pass
