"""
Pytest configuration and fixtures.

WHY: Fixtures provide reusable test setup/teardown logic, reducing
duplication and ensuring consistent test environments.
"""

import os
import tempfile

# Settings are read at import time; these must be in place first
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-jwt-signing-only")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOCALE", "en")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="muza-uploads-"))

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from httpx import AsyncClient, ASGITransport

from muza_accounts.main import create_app
from muza_accounts.models.base import Base
from muza_accounts.db.session import get_db
from muza_accounts.middleware import rate_limiter as rate_limiter_module
from muza_accounts.services.avatar_storage import ProfileImageStorage
from muza_accounts.services.email import EmailService, MockEmailProvider
from muza_accounts.services.registration import issue_token

from tests.factories import TEST_PASSWORD, UserFactory


# WHY: SQLite in memory keeps tests free of an external database
TEST_ASYNC_DATABASE_URL = "sqlite+aiosqlite:///:memory:"



@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """
    Create a test database engine.

    WHY: Function scope ensures each test gets a fresh database state,
    preventing test pollution and ensuring test isolation.
    """
    engine = create_async_engine(TEST_ASYNC_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a test database session.

    Yields:
        AsyncSession: Database session shared by the test and the app
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mock_email_provider() -> MockEmailProvider:
    """
    Mail provider that records messages instead of sending them.

    WHY: Tests read codes and notices back from sent_emails.
    """
    return MockEmailProvider()


@pytest.fixture
def email_service(mock_email_provider) -> EmailService:
    return EmailService(provider=mock_email_provider)


@pytest.fixture
def image_storage(tmp_path) -> ProfileImageStorage:
    """Avatar storage rooted in a per-test temporary directory."""
    return ProfileImageStorage(upload_dir=str(tmp_path / "uploads"))


@pytest.fixture
def app(email_service, image_storage):
    return create_app(email_service=email_service, image_storage=image_storage)


@pytest_asyncio.fixture
async def client(app, db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test HTTP client.

    WHY: AsyncClient drives the ASGI app in-process; get_db is overridden
    so requests and assertions see the same session.

    Yields:
        AsyncClient: HTTP client for making test requests
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession):
    """
    Create a test user with a local password.

    WHY: Most account endpoints act on the authenticated user.
    """
    return await UserFactory.create(
        db_session,
        name="Test User",
        email="testuser@example.com",
        password=TEST_PASSWORD,
    )


@pytest.fixture
def auth_headers(test_user) -> dict:
    """Bearer header for test_user."""
    return {"Authorization": f"Bearer {issue_token(test_user)}"}


@pytest.fixture
def fixed_code(monkeypatch) -> str:
    """
    Make every issued verification code 123456.

    WHY: Lets flow tests submit the code without reading it from the email.
    """
    from muza_accounts.models.verification_code import VerificationCode

    monkeypatch.setattr(VerificationCode, "generate_code", classmethod(lambda cls: "123456"))
    return "123456"


@pytest.fixture(autouse=True)
def disable_rate_limiting(monkeypatch):
    """
    Disable rate limiting for all tests.

    WHY: Rate limiting uses Redis, which is not available in tests and
    would otherwise count requests across tests. Rate limiting is tested
    separately in unit tests with mocked Redis.
    """
    from unittest.mock import AsyncMock, MagicMock

    mock_result = rate_limiter_module.RateLimitResult(
        allowed=True,
        remaining=100,
        reset_after=60,
        limit=100,
    )

    mock_limiter = MagicMock()
    mock_limiter.check_rate_limit = AsyncMock(return_value=mock_result)

    async def mock_get_rate_limiter():
        return mock_limiter

    monkeypatch.setattr(rate_limiter_module, "get_rate_limiter", mock_get_rate_limiter)
    rate_limiter_module._rate_limiter = None

    yield mock_limiter

    rate_limiter_module._rate_limiter = None
