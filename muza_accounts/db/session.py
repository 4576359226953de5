"""
Database session management.

WHY: Async database sessions are required for FastAPI's async/await pattern.
One session per request, committed when the handler returns and rolled back
when it raises, makes every multi-statement operation (invalidate-then-insert,
update-then-delete) all-or-nothing.
"""

from typing import Any, AsyncGenerator, Dict
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from muza_accounts.core.config import settings


def _engine_options(url: str) -> Dict[str, Any]:
    """
    Pool options for the configured backend.

    WHY: SQLite (tests, local dev) uses a static/single-connection pool that
    rejects pool_size and max_overflow.
    """
    options: Dict[str, Any] = {"echo": settings.DEBUG, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(pool_size=10, max_overflow=20)
    return options


engine = create_async_engine(
    settings.async_database_url,
    **_engine_options(settings.async_database_url),
)

# WHY: expire_on_commit=False prevents lazy-loading issues after commit.
# autoflush=False gives explicit control over when statements are sent.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.

    Yields:
        AsyncSession: Database session for the request
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
