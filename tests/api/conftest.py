"""Shared fixtures for API tests.

Requests run in-process over ASGITransport with the session dependency
pointed at the per-test SQLite database.
"""

from collections.abc import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shopcatalog.infrastructure.database import get_session
from shopcatalog.main import app


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client without authentication."""

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(make_token: Callable[..., str]) -> dict[str, str]:
    """Bearer headers for an administrator."""
    return {"Authorization": f"Bearer {make_token(user_id=1, username='admin')}"}


@pytest.fixture
def customer_headers(make_token: Callable[..., str]) -> dict[str, str]:
    """Bearer headers for a customer."""
    return {
        "Authorization": f"Bearer {make_token(user_id=7, role='Customer', username='ana')}"
    }
