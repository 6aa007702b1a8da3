"""
Integration tests for the organizations endpoints.
"""

import pytest


@pytest.mark.integration
class TestOrganizations:
    async def test_list_shows_only_own_organization(self, client, tenant, other_tenant):
        response = await client.get("/organizations", headers=tenant.agent_headers)

        assert response.status_code == 200
        body = response.json()
        assert [org["id"] for org in body["data"]] == [tenant.organization_id]
        assert body["next_cursor"] == ""
        assert body["prev_cursor"] == ""

    async def test_get_own_organization(self, client, tenant):
        response = await client.get(
            f"/organizations/{tenant.organization_id}", headers=tenant.agent_headers
        )

        assert response.status_code == 200
        assert response.json()["slug"] == "acme"

    async def test_other_organization_is_forbidden(self, client, tenant, other_tenant):
        response = await client.get(
            f"/organizations/{other_tenant.organization_id}", headers=tenant.agent_headers
        )
        assert response.status_code == 403

    async def test_unknown_organization_is_forbidden(self, client, tenant):
        response = await client.get("/organizations/9999", headers=tenant.agent_headers)
        assert response.status_code == 403

    async def test_rename(self, client, tenant):
        response = await client.patch(
            f"/organizations/{tenant.organization_id}",
            json={"name": "Acme Support"},
            headers=tenant.admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Acme Support"
        assert response.json()["slug"] == "acme"

    async def test_taken_slug_conflicts(self, client, tenant, other_tenant):
        response = await client.patch(
            f"/organizations/{tenant.organization_id}",
            json={"slug": "globex"},
            headers=tenant.admin_headers,
        )
        assert response.status_code == 409

    async def test_invalid_slug_rejected(self, client, tenant):
        response = await client.patch(
            f"/organizations/{tenant.organization_id}",
            json={"slug": "Not A Slug"},
            headers=tenant.admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
