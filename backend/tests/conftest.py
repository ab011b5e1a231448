"""
Shared fixtures: an in-memory SQLite database per test, session helpers,
and an HTTP client bound to the app with the database and current user
overridden.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SUPABASE_URL", "http://supabase.test")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
os.environ.setdefault("EMAIL_PROVIDER_API_KEY", "")
os.environ.setdefault("EMAIL_FROM", "")

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import zalna.models  # noqa: E402,F401
from zalna.database import Base, get_db  # noqa: E402
from zalna.dependencies import get_current_user  # noqa: E402
from zalna.main import app  # noqa: E402
from zalna.models.enums import UserRole  # noqa: E402
from zalna.models.user import User  # noqa: E402

from factories import make_user  # noqa: E402


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def admin_user(db) -> User:
    return await make_user(db, role=UserRole.ADMIN.value, email="admin@zalna.test")


@pytest.fixture
async def client_user(db) -> User:
    return await make_user(db, role=UserRole.CLIENT.value, email="client@zalna.test")


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login_as():
    """Make subsequent requests run as the given user."""

    def _login(user: User):
        async def override_current_user():
            return user

        app.dependency_overrides[get_current_user] = override_current_user

    return _login
