"""
Integration tests for the attachments endpoints.

Files go to the per-test upload directory, or to an in-memory S3 client
when the s3 backend is selected.
"""

from contextlib import asynccontextmanager
from pathlib import Path

import pytest

from helpdesk.services.file_storage import FileStorageService, get_file_storage_service


async def upload(client, tenant, name: str = "notes.txt", content: bytes = b"hello world") -> dict:
    response = await client.post(
        "/attachments",
        files={"file": (name, content, "text/plain")},
        headers=tenant.agent_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def ticket(client, tenant) -> dict:
    response = await client.post("/tickets", json={"subject": "Screenshot"}, headers=tenant.agent_headers)
    return response.json()


@pytest.mark.integration
class TestAttachmentFiles:
    async def test_upload_stores_metadata_and_file(self, client, tenant, test_settings):
        attachment = await upload(client, tenant)

        assert attachment["file_name"] == "notes.txt"
        assert attachment["content_type"] == "text/plain"
        assert attachment["size"] == 11
        assert "file_path" not in attachment

        stored = list(Path(test_settings.upload_dir).rglob("notes.txt"))
        assert len(stored) == 1
        assert stored[0].read_bytes() == b"hello world"

    async def test_empty_upload_rejected(self, client, tenant):
        response = await client.post(
            "/attachments", files={"file": ("empty.txt", b"", "text/plain")}, headers=tenant.agent_headers
        )
        assert response.status_code == 400

    async def test_oversized_upload_rejected(self, client, tenant, monkeypatch, test_settings):
        monkeypatch.setattr(test_settings, "max_upload_bytes", 4)

        response = await client.post(
            "/attachments", files={"file": ("big.txt", b"12345", "text/plain")}, headers=tenant.agent_headers
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "File too large"

    async def test_download(self, client, tenant):
        attachment = await upload(client, tenant, content=b"file body")

        response = await client.get(f"/attachments/{attachment['id']}", headers=tenant.agent_headers)

        assert response.status_code == 200
        assert response.content == b"file body"
        assert response.headers["content-type"].startswith("text/plain")
        assert "x-ratelimit-remaining" in response.headers

    async def test_download_other_tenant_forbidden(self, client, tenant, other_tenant):
        attachment = await upload(client, tenant)

        response = await client.get(
            f"/attachments/{attachment['id']}", headers=other_tenant.agent_headers
        )
        assert response.status_code == 403

    async def test_delete_removes_file(self, client, tenant, test_settings):
        attachment = await upload(client, tenant)

        response = await client.delete(f"/attachments/{attachment['id']}", headers=tenant.agent_headers)
        assert response.status_code == 200

        assert list(Path(test_settings.upload_dir).rglob("notes.txt")) == []
        response = await client.get(f"/attachments/{attachment['id']}", headers=tenant.agent_headers)
        assert response.status_code == 404

    async def test_list(self, client, tenant, other_tenant):
        ours = await upload(client, tenant)
        await upload(client, other_tenant)

        response = await client.get("/attachments", headers=tenant.agent_headers)
        assert [a["id"] for a in response.json()["data"]] == [ours["id"]]


@pytest.mark.integration
class TestAttachmentLinks:
    async def test_link_and_unlink_ticket(self, client, tenant, ticket):
        attachment = await upload(client, tenant)
        url = f"/attachments/{attachment['id']}/ticket/{ticket['id']}"

        assert (await client.post(url, headers=tenant.agent_headers)).status_code == 200
        assert (await client.post(url, headers=tenant.agent_headers)).status_code == 409
        assert (await client.delete(url, headers=tenant.agent_headers)).status_code == 200
        assert (await client.delete(url, headers=tenant.agent_headers)).status_code == 404

    async def test_link_and_unlink_comment(self, client, tenant, ticket):
        attachment = await upload(client, tenant)
        comment = (
            await client.post(
                "/comments",
                json={"ticket_id": ticket["id"], "body": "see attached"},
                headers=tenant.agent_headers,
            )
        ).json()
        url = f"/attachments/{attachment['id']}/comment/{comment['id']}"

        assert (await client.post(url, headers=tenant.agent_headers)).status_code == 200
        assert (await client.post(url, headers=tenant.agent_headers)).status_code == 409
        assert (await client.delete(url, headers=tenant.agent_headers)).status_code == 200

    async def test_cannot_link_to_other_tenants_ticket(self, client, tenant, other_tenant):
        attachment = await upload(client, tenant)
        theirs = (
            await client.post("/tickets", json={"subject": "theirs"}, headers=other_tenant.agent_headers)
        ).json()

        response = await client.post(
            f"/attachments/{attachment['id']}/ticket/{theirs['id']}", headers=tenant.agent_headers
        )
        assert response.status_code == 403

    async def test_link_to_missing_ticket(self, client, tenant):
        attachment = await upload(client, tenant)

        response = await client.post(
            f"/attachments/{attachment['id']}/ticket/9999", headers=tenant.agent_headers
        )
        assert response.status_code == 404


@pytest.fixture
def s3_storage(app, test_settings, s3_client) -> FileStorageService:
    """Route the app's attachment storage through the s3 backend."""
    service = FileStorageService(settings=test_settings.model_copy(update={"storage_backend": "s3"}))

    @asynccontextmanager
    async def fake_client():
        yield s3_client

    service.get_client = fake_client
    app.dependency_overrides[get_file_storage_service] = lambda: service
    return service


@pytest.mark.integration
class TestS3AttachmentFiles:
    async def test_upload_puts_object(self, client, tenant, s3_storage, s3_client, test_settings):
        await upload(client, tenant, content=b"to the bucket")

        [(bucket, key)] = s3_client.objects
        assert bucket == test_settings.s3_bucket
        assert key.startswith(f"{tenant.organization_id}/")
        assert s3_client.objects[(bucket, key)] == (b"to the bucket", "text/plain")
        assert list(Path(test_settings.upload_dir).rglob("notes.txt")) == []

    async def test_download_redirects_to_presigned_url(self, client, tenant, s3_storage):
        attachment = await upload(client, tenant)

        response = await client.get(f"/attachments/{attachment['id']}", headers=tenant.agent_headers)

        assert response.status_code == 307
        assert response.headers["location"].startswith("https://s3.test/")
        assert "op=get_object" in response.headers["location"]
        assert "x-ratelimit-remaining" in response.headers

    async def test_failed_put_is_unavailable(self, client, tenant, s3_storage, s3_client):
        s3_client.fail_writes = True

        response = await client.post(
            "/attachments", files={"file": ("a.txt", b"abc", "text/plain")}, headers=tenant.agent_headers
        )

        assert response.status_code == 503
        listing = await client.get("/attachments", headers=tenant.agent_headers)
        assert listing.json()["data"] == []

    async def test_delete_removes_object(self, client, tenant, s3_storage, s3_client):
        attachment = await upload(client, tenant)

        response = await client.delete(f"/attachments/{attachment['id']}", headers=tenant.agent_headers)

        assert response.status_code == 200
        assert s3_client.objects == {}
