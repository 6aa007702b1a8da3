"""
Pytest fixtures for Helpdesk API testing infrastructure.

This module provides:
1. Per-test SQLite database and settings
2. Seeded organizations, users and API keys
3. An httpx client bound to the ASGI app
"""

import os
from collections.abc import AsyncGenerator
from dataclasses import dataclass

import pytest
import pytest_asyncio
from botocore.exceptions import ClientError
from httpx import ASGITransport, AsyncClient

# Set environment variables BEFORE any imports that might load settings
os.environ.setdefault("HELPDESK_ENVIRONMENT", "testing")
os.environ.setdefault("HELPDESK_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from helpdesk.config import clear_settings_cache, get_settings  # noqa: E402
from helpdesk.core.database import close_db, create_all, get_db_context, reset_db_state  # noqa: E402
from helpdesk.core.rate_limit import reset_rate_limiter  # noqa: E402
from helpdesk.models.enums import UserRole  # noqa: E402
from helpdesk.repositories.api_key import ApiKeyRepository  # noqa: E402
from helpdesk.repositories.organization import OrganizationRepository  # noqa: E402
from helpdesk.repositories.user import UserRepository  # noqa: E402
from helpdesk.services.file_storage import reset_file_storage_service  # noqa: E402


def _reset_singletons() -> None:
    clear_settings_cache()
    reset_db_state()
    reset_rate_limiter()
    reset_file_storage_service()


# ==================== SETTINGS FIXTURES ====================


@pytest.fixture
def test_settings(tmp_path, monkeypatch):
    """
    Point the app at a fresh SQLite file and local upload directory.

    The rate limit is raised so ordinary tests never trip it; rate limit
    tests install their own limiter.
    """
    monkeypatch.setenv("HELPDESK_ENVIRONMENT", "testing")
    monkeypatch.setenv("HELPDESK_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'helpdesk.db'}")
    monkeypatch.setenv("HELPDESK_STORAGE_BACKEND", "local")
    monkeypatch.setenv("HELPDESK_UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("HELPDESK_RATE_LIMIT_REQUESTS", "10000")
    _reset_singletons()

    yield get_settings()

    _reset_singletons()


# ==================== DATABASE FIXTURES ====================


@pytest_asyncio.fixture
async def database(test_settings) -> AsyncGenerator[None, None]:
    """Create all tables for the test and dispose the engine afterwards."""
    await create_all()
    yield
    await close_db()


@dataclass
class Tenant:
    """An organization with one admin and one agent, each with a key."""

    organization_id: int
    admin_id: int
    admin_key: str
    agent_id: int
    agent_key: str

    @property
    def admin_headers(self) -> dict[str, str]:
        return {"x-api-key": self.admin_key}

    @property
    def agent_headers(self) -> dict[str, str]:
        return {"x-api-key": self.agent_key}


async def create_tenant(slug: str) -> Tenant:
    """Seed an organization with an admin and an agent."""
    async with get_db_context() as db:
        organization = await OrganizationRepository(db).create(name=slug.title(), slug=slug)
        users = UserRepository(db)
        keys = ApiKeyRepository(db)
        admin = await users.create(
            organization_id=organization.id,
            email=f"admin@{slug}.example.com",
            name=f"{slug} admin",
            role=UserRole.ADMIN.value,
        )
        agent = await users.create(
            organization_id=organization.id,
            email=f"agent@{slug}.example.com",
            name=f"{slug} agent",
            role=UserRole.AGENT.value,
        )
        _, admin_key = await keys.issue(admin.id)
        _, agent_key = await keys.issue(agent.id)

    return Tenant(
        organization_id=organization.id,
        admin_id=admin.id,
        admin_key=admin_key,
        agent_id=agent.id,
        agent_key=agent_key,
    )


@pytest_asyncio.fixture
async def tenant(database) -> Tenant:
    """Primary organization used by most tests."""
    return await create_tenant("acme")


@pytest_asyncio.fixture
async def other_tenant(database) -> Tenant:
    """Second organization for cross-tenant checks."""
    return await create_tenant("globex")


# ==================== STORAGE FIXTURES ====================


class FakeS3Client:
    """Records objects in a dict, mimicking the aiobotocore calls we make."""

    def __init__(self, fail_writes: bool = False):
        self.objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self.fail_writes = fail_writes

    async def put_object(self, Bucket, Key, Body, ContentType):
        if self.fail_writes:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
        self.objects[(Bucket, Key)] = (Body, ContentType)

    async def head_object(self, Bucket, Key):
        if (Bucket, Key) not in self.objects:
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject")
        return {"ContentLength": len(self.objects[(Bucket, Key)][0])}

    async def delete_object(self, Bucket, Key):
        self.objects.pop((Bucket, Key), None)

    async def generate_presigned_url(self, operation, Params, ExpiresIn):
        return f"https://s3.test/{Params['Bucket']}/{Params['Key']}?op={operation}&ttl={ExpiresIn}"


@pytest.fixture
def s3_client() -> FakeS3Client:
    """In-memory S3 client for the s3 storage backend."""
    return FakeS3Client()


# ==================== CLIENT FIXTURES ====================


@pytest_asyncio.fixture
async def app(database):
    """Application built against the per-test settings."""
    from helpdesk.main import create_app

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated HTTP client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ==================== MARKERS ====================


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no database)")
    config.addinivalue_line("markers", "integration: Integration tests (real database)")
    config.addinivalue_line("markers", "slow: Tests that take >1 second")
