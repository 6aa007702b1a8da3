"""
Integration tests for the tickets endpoints.

Covers compound-cursor pagination (newest first), filters, lifecycle
timestamps and tenant checks.
"""

import pytest

from helpdesk.core.cursor import encode_cursor

# Days of month for tickets sharing created_at values in mixed order
MIXED_DAYS = [2, 1, 2, 3, 1, 2, 3]


async def create_ticket(client, tenant, **payload) -> dict:
    payload.setdefault("subject", "Printer jammed")
    response = await client.post("/tickets", json=payload, headers=tenant.agent_headers)
    assert response.status_code == 201, response.text
    return response.json()


async def collect_pages(client, tenant, params: dict) -> list[dict]:
    """Follow next_cursor until exhausted, returning every page body."""
    pages = []
    cursor = ""
    while True:
        query = dict(params)
        if cursor:
            query["cursor"] = cursor
        response = await client.get("/tickets", params=query, headers=tenant.agent_headers)
        assert response.status_code == 200, response.text
        body = response.json()
        pages.append(body)
        cursor = body["next_cursor"]
        if not cursor:
            return pages


@pytest.mark.integration
class TestTicketPagination:
    async def test_five_tickets_in_pages_of_two(self, client, tenant):
        created = [
            await create_ticket(
                client, tenant, subject=f"Ticket {i}", created_at=f"2026-01-0{i}T09:00:00Z"
            )
            for i in range(1, 6)
        ]

        pages = await collect_pages(client, tenant, {"limit": 2})

        assert [len(p["data"]) for p in pages] == [2, 2, 1]
        subjects = [t["subject"] for p in pages for t in p["data"]]
        assert subjects == ["Ticket 5", "Ticket 4", "Ticket 3", "Ticket 2", "Ticket 1"]
        assert pages[0]["prev_cursor"] == ""
        assert pages[1]["prev_cursor"] != ""
        assert pages[2]["next_cursor"] == ""
        assert {t["id"] for t in created} == {t["id"] for p in pages for t in p["data"]}

    async def test_identical_timestamps_are_not_skipped_or_repeated(self, client, tenant):
        for i in range(5):
            await create_ticket(
                client, tenant, subject=f"Same {i}", created_at="2026-02-01T00:00:00Z"
            )

        pages = await collect_pages(client, tenant, {"limit": 2})
        ids = [t["id"] for p in pages for t in p["data"]]

        assert len(ids) == 5
        assert ids == sorted(ids, reverse=True)

    async def test_default_page_size(self, client, tenant):
        for i in range(12):
            await create_ticket(client, tenant, subject=f"T{i}")

        response = await client.get("/tickets", headers=tenant.agent_headers)
        body = response.json()

        assert len(body["data"]) == 10
        assert body["next_cursor"]

    async def test_invalid_cursor(self, client, tenant):
        response = await client.get(
            "/tickets", params={"cursor": "garbage"}, headers=tenant.agent_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid cursor"

    @pytest.mark.parametrize(
        "page_size", [1, 2, 3, len(MIXED_DAYS) - 1, len(MIXED_DAYS), len(MIXED_DAYS) + 1]
    )
    async def test_walk_with_shared_timestamps_returns_each_ticket_once(
        self, client, tenant, page_size
    ):
        created = [
            await create_ticket(
                client, tenant, subject=f"Mixed {i}", created_at=f"2026-04-0{day}T10:00:00Z"
            )
            for i, day in enumerate(MIXED_DAYS)
        ]
        expected = [
            t["id"]
            for t in sorted(created, key=lambda t: (t["created_at"], t["id"]), reverse=True)
        ]

        pages = await collect_pages(client, tenant, {"limit": page_size})
        walked = [t["id"] for p in pages for t in p["data"]]

        assert walked == expected
        assert len(set(walked)) == len(MIXED_DAYS)
        assert all(len(p["data"]) == page_size for p in pages[:-1])
        assert 1 <= len(pages[-1]["data"]) <= page_size

    @pytest.mark.parametrize(
        "position",
        [
            {"created_at": "0001-01-01T00:00:00+01:00", "id": 1},
            {"created_at": "2026-01-01T00:00:00Z", "id": 10**30},
            {"created_at": "2026-01-01T00:00:00Z", "id": 2**31},
        ],
    )
    async def test_out_of_range_cursor_is_rejected(self, client, tenant, position):
        response = await client.get(
            "/tickets", params={"cursor": encode_cursor(position)}, headers=tenant.agent_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid cursor"

    async def test_cursor_from_simple_listing_is_rejected(self, client, tenant):
        response = await client.get(
            "/tickets", params={"cursor": encode_cursor({"id": 3})}, headers=tenant.agent_headers
        )
        assert response.status_code == 400

    async def test_empty_listing(self, client, tenant):
        response = await client.get("/tickets", headers=tenant.agent_headers)
        assert response.json() == {"data": [], "next_cursor": "", "prev_cursor": ""}


@pytest.mark.integration
class TestTicketFilters:
    async def test_status_and_priority(self, client, tenant):
        await create_ticket(client, tenant, subject="open-high", priority="high")
        await create_ticket(client, tenant, subject="closed-low", status="closed", priority="low")

        closed = await client.get("/tickets", params={"status": "closed"}, headers=tenant.agent_headers)
        assert [t["subject"] for t in closed.json()["data"]] == ["closed-low"]

        high = await client.get("/tickets", params={"priority": "high"}, headers=tenant.agent_headers)
        assert [t["subject"] for t in high.json()["data"]] == ["open-high"]

    async def test_unknown_status_rejected(self, client, tenant):
        response = await client.get("/tickets", params={"status": "pending"}, headers=tenant.agent_headers)
        assert response.status_code == 400

    async def test_assignee_and_contact(self, client, tenant):
        contact = (
            await client.post(
                "/contacts",
                json={"name": "Pat", "emails": [{"email": "pat@example.com"}]},
                headers=tenant.agent_headers,
            )
        ).json()
        await create_ticket(client, tenant, subject="mine", assignee_id=tenant.agent_id)
        await create_ticket(client, tenant, subject="pat's", contact_id=contact["id"])

        mine = await client.get(
            "/tickets", params={"assignee_id": tenant.agent_id}, headers=tenant.agent_headers
        )
        assert [t["subject"] for t in mine.json()["data"]] == ["mine"]

        pats = await client.get(
            "/tickets", params={"contact_id": contact["id"]}, headers=tenant.agent_headers
        )
        assert [t["subject"] for t in pats.json()["data"]] == ["pat's"]

    async def test_created_at_bounds_are_exclusive(self, client, tenant):
        for day in (1, 2, 3):
            await create_ticket(
                client, tenant, subject=f"day {day}", created_at=f"2026-03-0{day}T00:00:00Z"
            )

        response = await client.get(
            "/tickets",
            params={
                "created_at_gt": "2026-03-01T00:00:00Z",
                "created_at_lt": "2026-03-03T00:00:00Z",
            },
            headers=tenant.agent_headers,
        )
        assert [t["subject"] for t in response.json()["data"]] == ["day 2"]

    async def test_malformed_date_rejected(self, client, tenant):
        response = await client.get(
            "/tickets", params={"updated_at_gt": "last week"}, headers=tenant.agent_headers
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid updated_at_gt date format"

    async def test_out_of_range_date_rejected(self, client, tenant):
        response = await client.get(
            "/tickets",
            params={"created_at_gt": "0001-01-01T00:00:00+01:00"},
            headers=tenant.agent_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid created_at_gt date format"

    async def test_foreign_assignee_filter_rejected(self, client, tenant, other_tenant):
        response = await client.get(
            "/tickets", params={"assignee_id": other_tenant.agent_id}, headers=tenant.agent_headers
        )
        assert response.status_code == 400

    async def test_listing_is_tenant_scoped(self, client, tenant, other_tenant):
        await create_ticket(client, tenant, subject="ours")
        await create_ticket(client, other_tenant, subject="theirs")

        response = await client.get("/tickets", headers=tenant.agent_headers)
        assert [t["subject"] for t in response.json()["data"]] == ["ours"]


@pytest.mark.integration
class TestTicketLifecycle:
    async def test_defaults(self, client, tenant):
        ticket = await create_ticket(client, tenant)

        assert ticket["status"] == "open"
        assert ticket["priority"] == "normal"
        assert ticket["closed_at"] is None
        assert ticket["organization_id"] == tenant.organization_id
        assert ticket["created_at"].endswith("Z")

    async def test_out_of_range_backdate_rejected(self, client, tenant):
        response = await client.post(
            "/tickets",
            json={"subject": "Old", "created_at": "0001-01-01T00:00:00+01:00"},
            headers=tenant.agent_headers,
        )

        assert response.status_code == 400
        assert "body.created_at" in response.json()["details"]["fields"]

    async def test_out_of_range_path_id_rejected(self, client, tenant):
        response = await client.get(f"/tickets/{10**30}", headers=tenant.agent_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Value out of range"

    async def test_create_closed_sets_closed_at(self, client, tenant):
        ticket = await create_ticket(client, tenant, status="closed")
        assert ticket["closed_at"] is not None

    async def test_close_and_reopen(self, client, tenant):
        ticket = await create_ticket(client, tenant)
        url = f"/tickets/{ticket['id']}"

        closed = await client.patch(url, json={"status": "closed"}, headers=tenant.agent_headers)
        assert closed.json()["status"] == "closed"
        closed_at = closed.json()["closed_at"]
        assert closed_at is not None

        again = await client.patch(
            url, json={"status": "closed", "subject": "still closed"}, headers=tenant.agent_headers
        )
        assert again.json()["closed_at"] == closed_at

        reopened = await client.patch(url, json={"status": "open"}, headers=tenant.agent_headers)
        assert reopened.json()["closed_at"] is None

    async def test_unassign_with_explicit_null(self, client, tenant):
        ticket = await create_ticket(client, tenant, assignee_id=tenant.agent_id)

        response = await client.patch(
            f"/tickets/{ticket['id']}", json={"assignee_id": None}, headers=tenant.agent_headers
        )
        assert response.json()["assignee_id"] is None

    async def test_foreign_assignee_rejected(self, client, tenant, other_tenant):
        response = await client.post(
            "/tickets",
            json={"subject": "x", "assignee_id": other_tenant.agent_id},
            headers=tenant.agent_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid assignee"

    async def test_missing_subject_rejected(self, client, tenant):
        response = await client.post("/tickets", json={}, headers=tenant.agent_headers)
        assert response.status_code == 400

    async def test_delete(self, client, tenant):
        ticket = await create_ticket(client, tenant)

        response = await client.delete(f"/tickets/{ticket['id']}", headers=tenant.agent_headers)
        assert response.status_code == 200

        response = await client.get(f"/tickets/{ticket['id']}", headers=tenant.agent_headers)
        assert response.status_code == 404

    async def test_other_tenant_forbidden(self, client, tenant, other_tenant):
        ticket = await create_ticket(client, tenant)

        response = await client.get(f"/tickets/{ticket['id']}", headers=other_tenant.agent_headers)
        assert response.status_code == 403

        response = await client.patch(
            f"/tickets/{ticket['id']}", json={"subject": "mine now"}, headers=other_tenant.agent_headers
        )
        assert response.status_code == 403
