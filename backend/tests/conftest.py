"""
QuickAI Backend - Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Environment variables are set before any `quickai` import, so the settings
singleton, the module-level engine and the gateway singletons are all built
against test values (in-memory SQLite, fake keys, temp spool directory).

Fixture Hierarchy:
    ├── mock_db_session:   AsyncMock session (no real DB)
    ├── sqlite_session:    real AsyncSession on in-memory aiosqlite with tables
    ├── free_ctx / premium_ctx / exhausted_ctx: RequestContext variants
    ├── gateways:          every collaborator of ActionService patched
    ├── sample_image_bytes / sample_pdf_bytes
    ├── test_client:       httpx client, auth + db dependencies overridden
    ├── anon_client:       httpx client, real auth dependency
    └── mock_http:         routes httpx.AsyncClient through a MockTransport
"""

import os
import tempfile
from contextlib import contextmanager
from io import BytesIO
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (before any quickai import)
# ══════════════════════════════════════════════════════════════════════════

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["CLERK_SECRET_KEY"] = "sk_test_not_real"
os.environ["CLERK_AUTHORIZED_PARTIES"] = ""
os.environ["UPLOAD_ROOT"] = tempfile.mkdtemp(prefix="quickai_test_")
os.environ["LOG_LEVEL"] = "WARNING"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from pypdf import PdfWriter  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from quickai.database import Base, get_db_session  # noqa: E402
from quickai.middleware.auth import get_request_context  # noqa: E402
from quickai.models.creation import Creation  # noqa: E402,F401
from quickai.schemas.action import RequestContext  # noqa: E402

_RealAsyncClient = httpx.AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.commit.side_effect = Exception("connection lost")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def sqlite_session():
    """A real session on a fresh in-memory database with all tables created."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()


# ══════════════════════════════════════════════════════════════════════════
# Request contexts
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def free_ctx():
    return RequestContext(user_id="user_free", plan="free", free_usage=2)


@pytest.fixture
def exhausted_ctx():
    return RequestContext(user_id="user_free", plan="free", free_usage=5)


@pytest.fixture
def premium_ctx():
    return RequestContext(user_id="user_premium", plan="premium", free_usage=0)


# ══════════════════════════════════════════════════════════════════════════
# Gateways
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def gateways():
    """
    Patches every collaborator ActionService talks to.

    Defaults describe a fully working world; tests override single methods
    with side_effect to inject failures.
    """
    module = "quickai.services.action_service"
    with patch(f"{module}.gemini_service") as llm, \
            patch(f"{module}.render_service") as renderer, \
            patch(f"{module}.asset_service") as assets, \
            patch(f"{module}.document_service") as documents, \
            patch(f"{module}.file_service") as files, \
            patch(f"{module}.identity_service") as identity, \
            patch(f"{module}.creation_service") as creations:

        llm.generate_text = AsyncMock(return_value="Generated text")
        renderer.render = AsyncMock(return_value=b"\x89PNG-image-bytes")
        assets.upload = AsyncMock(
            return_value={
                "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/abc.png",
                "public_id": "abc",
            }
        )
        assets.transformed_url = MagicMock(
            return_value="https://res.cloudinary.com/demo/image/upload/e_gen_remove:dog/abc"
        )
        documents.extract_text = AsyncMock(return_value="Jane Doe, Python developer")
        files.validate_size = MagicMock(return_value=None)
        files.store_upload = AsyncMock(return_value="/tmp/quickai/spooled.png")
        files.cleanup_file = AsyncMock(return_value=None)
        identity.set_free_usage = AsyncMock(return_value=None)
        creations.record = AsyncMock(return_value=MagicMock())

        yield SimpleNamespace(
            llm=llm,
            renderer=renderer,
            assets=assets,
            documents=documents,
            files=files,
            identity=identity,
            creations=creations,
        )


@contextmanager
def _mock_http(handler):
    def factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return _RealAsyncClient(*args, **kwargs)

    with patch("httpx.AsyncClient", side_effect=factory):
        yield


@pytest.fixture
def mock_http():
    """
    Routes every httpx.AsyncClient created by application code through a
    MockTransport.

    Usage:
        with mock_http(lambda request: httpx.Response(200, json={...})):
            ...
    """
    return _mock_http


# ══════════════════════════════════════════════════════════════════════════
# Sample payloads
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_pdf_bytes():
    """A one-page PDF with no text layer."""
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


# ══════════════════════════════════════════════════════════════════════════
# HTTP clients
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def anon_client(mock_db_session):
    """Client against the real auth dependency; only the db is replaced."""
    from quickai.main import app

    async def override_db():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = override_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    Client whose requests are authenticated as whatever `client.ctx` holds.

    Usage:
        test_client.ctx = premium_ctx
        response = await test_client.post("/api/ai/generate-image", json={...})
    """
    from quickai.main import app

    async def override_db():
        yield mock_db_session

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        client.ctx = RequestContext(user_id="user_free", plan="free", free_usage=0)
        app.dependency_overrides[get_db_session] = override_db
        app.dependency_overrides[get_request_context] = lambda: client.ctx
        yield client
    app.dependency_overrides.clear()
