"""
Pytest configuration and fixtures for the cookie consent service tests
"""

import os
from collections.abc import AsyncGenerator

# Configure the app for tests BEFORE importing it
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from cookie_consent.constants.user_types import UserType  # noqa: E402
from cookie_consent.database import Base, get_db  # noqa: E402
from cookie_consent.models import Cookie, CookieCategory, Person, User  # noqa: E402

# Test database URL (SQLite in-memory for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def test_engine():
    """Fresh in-memory database per test function"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for tests that need it."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def catalog(test_db: AsyncSession) -> dict[str, CookieCategory]:
    """Two categories in catalog order: Marketing first, then Analytics."""
    marketing = CookieCategory(
        name="Marketing",
        description="Ads and retargeting",
        is_mandatory=False,
        default_value=False,
        additional_info="Shared with advertising partners",
        position=1,
    )
    analytics = CookieCategory(
        name="Analytics",
        description="Usage statistics",
        is_mandatory=False,
        default_value=True,
        position=2,
    )
    test_db.add_all([marketing, analytics])
    await test_db.flush()

    test_db.add_all(
        [
            Cookie(name="_fbp", description="Facebook pixel", category_id=marketing.id),
            Cookie(name="ads_id", category_id=marketing.id),
            Cookie(name="_ga", description="Google Analytics", category_id=analytics.id),
            Cookie(name="_gid", category_id=analytics.id),
        ]
    )
    await test_db.commit()
    await test_db.refresh(marketing)
    await test_db.refresh(analytics)

    return {"marketing": marketing, "analytics": analytics}


@pytest.fixture
async def test_account(test_db: AsyncSession) -> User:
    """A signed-in community member"""
    account = User(username="member", email="member@example.com", user_type=UserType.STANDARD)
    test_db.add(account)
    await test_db.commit()
    await test_db.refresh(account)
    return account


@pytest.fixture
async def known_person(test_db: AsyncSession) -> Person:
    """An anonymous person already keyed by browser ID 'browser-known'"""
    person = Person(browser_id="browser-known")
    test_db.add(person)
    await test_db.commit()
    await test_db.refresh(person)
    return person


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the FastAPI application bound to the test database"""
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()
