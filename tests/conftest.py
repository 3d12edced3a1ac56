"""Shared fixtures for catalog tests.

Every test gets a fresh in-memory SQLite database with the catalog
tables created.
"""

from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

import jwt
import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from shopcatalog.catalog import (
    CategoryManager,
    ProductCreate,
    ProductManager,
    ProductQueryEngine,
    ReviewManager,
)
from shopcatalog.catalog.models import Category, Product
from shopcatalog.domain.access import AuthContext
from shopcatalog.infrastructure.config import settings
from shopcatalog.infrastructure.database import create_tables


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory database with the catalog schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session on the test database."""
    async with session_factory() as session:
        yield session


# ============================================================================
# Caller Fixtures
# ============================================================================


@pytest.fixture
def admin() -> AuthContext:
    """Authenticated administrator."""
    return AuthContext(authenticated=True, user_id=1, username="admin", role=settings.admin_role)


@pytest.fixture
def customer() -> AuthContext:
    """Authenticated non-admin user."""
    return AuthContext(authenticated=True, user_id=7, username="ana", role="Customer")


@pytest.fixture
def anonymous() -> AuthContext:
    """Caller without credentials."""
    return AuthContext.anonymous()


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Build a signed bearer token the way the identity service does."""

    def _make(
        user_id: int | str = 1,
        role: str | None = settings.admin_role,
        username: str = "admin",
        expires_in: timedelta = timedelta(hours=1),
        **claims: Any,
    ) -> str:
        payload: dict[str, Any] = {
            "id": str(user_id),
            "username": username,
            "iss": settings.jwt_issuer,
            "aud": settings.jwt_audience,
            "exp": datetime.now(timezone.utc) + expires_in,
        }
        if role is not None:
            payload["role"] = role
        payload.update(claims)
        return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    return _make


# ============================================================================
# Manager Fixtures
# ============================================================================


@pytest.fixture
def categories(session: AsyncSession) -> CategoryManager:
    """Category manager on the test session."""
    return CategoryManager(session)


@pytest.fixture
def products(session: AsyncSession) -> ProductManager:
    """Product manager on the test session."""
    return ProductManager(session)


@pytest.fixture
def reviews(session: AsyncSession) -> ReviewManager:
    """Review manager on the test session."""
    return ReviewManager(session)


@pytest.fixture
def query_engine(session: AsyncSession) -> ProductQueryEngine:
    """Product query engine on the test session."""
    return ProductQueryEngine(session)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
async def snacks(categories: CategoryManager, admin: AuthContext) -> Category:
    """An active "Snacks" category."""
    return await categories.create(admin, "Snacks", description="Salty things")


@pytest.fixture
async def chips(products: ProductManager, admin: AuthContext, snacks: Category) -> Product:
    """A product linked to the Snacks category."""
    return await products.create(
        admin,
        ProductCreate(name="Chips", price=Decimal("10.00"), stock=5, category_id=snacks.id),
    )
