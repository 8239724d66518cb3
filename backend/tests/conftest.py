"""
Swagger Manager Backend - Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite with a
       StaticPool, so all sessions share the one connection) and a fresh
       artifact directory under tmp_path.

Fixture Hierarchy (all function-scoped):
    database ──▶ db_session
    artifact_storage ──▶ publisher ──▶ project_service / endpoint_service
    database + artifact_storage ──▶ app ──▶ test_client
    mock_db_session: AsyncMock session for pure unit tests
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

# Must happen before any swagger_manager import: settings load at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ARTIFACT_ROOT"] = tempfile.mkdtemp(prefix="swagger_manager_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["REGEN_RETRY_MIN_WAIT"] = "0"
os.environ["REGEN_RETRY_MAX_WAIT"] = "0"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from swagger_manager.config import Settings
from swagger_manager.database import Database
from swagger_manager.main import create_app
from swagger_manager.services.artifact_publisher import ArtifactPublisher
from swagger_manager.services.artifact_storage import LocalArtifactStorage
from swagger_manager.services.endpoint_service import EndpointService
from swagger_manager.services.project_service import ProjectService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PUBLIC_BASE_URL = "http://swagger.test"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """In-memory database with the full schema."""
    db = Database(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for tests that must not touch a database.

    Usage:
        with patch.object(EndpointStore, "find_many", AsyncMock(side_effect=...)):
            await publisher.regenerate(mock_db_session, project_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Artifacts and Services
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def artifact_root(tmp_path):
    root = tmp_path / "swagger-files"
    root.mkdir()
    return root


@pytest.fixture
def artifact_storage(artifact_root):
    return LocalArtifactStorage(str(artifact_root))


@pytest.fixture
def publisher(artifact_storage):
    return ArtifactPublisher(
        artifact_storage,
        server_url="",
        document_version="1.0.0",
        retry_attempts=3,
        retry_min_wait=0,
        retry_max_wait=0,
    )


@pytest.fixture
def project_service(publisher):
    return ProjectService(publisher)


@pytest.fixture
def endpoint_service(publisher):
    return EndpointService(publisher)


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(artifact_root):
    return Settings(
        database_url=TEST_DATABASE_URL,
        artifact_root=str(artifact_root),
        public_base_url=TEST_PUBLIC_BASE_URL,
        log_level="WARNING",
        regen_retry_attempts=2,
        regen_retry_min_wait=0,
        regen_retry_max_wait=0,
    )


@pytest.fixture
def app(test_settings, database, artifact_storage):
    return create_app(
        settings=test_settings,
        database=database,
        artifact_storage=artifact_storage,
    )


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    Usage:
        response = await test_client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def as_principal():
    """Headers identifying the caller: `as_principal("U1")`."""
    def _headers(principal: str) -> dict:
        return {"X-Principal-ID": principal}
    return _headers
