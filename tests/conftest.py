"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own aiosqlite in-memory engine with the schema
   created from Base.metadata (StaticPool keeps the single connection alive).
2. The app's get_db dependency is overridden to hand out one shared
   session, so data created through the API is visible to the test.
3. Nothing is shared between tests; the engine is disposed afterwards.

The signing secret and a low bcrypt cost are set before storefront is
imported, because Settings is read once at import time.
"""

import os

os.environ.setdefault("STOREFRONT_JWT_SECRET", "test-secret-0123456789abcdef0123456789")
os.environ.setdefault("STOREFRONT_BCRYPT_ROUNDS", "4")
os.environ.setdefault("STOREFRONT_DATABASE_URL", "sqlite+aiosqlite://")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from storefront.db.engine import get_db  # noqa: E402
from storefront.db.models import Base, Shop, User  # noqa: E402
from storefront.main import app  # noqa: E402

TEST_DB_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture()
async def engine():
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client with get_db pointed at the test session.

    Learn: the auth guards are NOT overridden. Every guarded route in the
    tests goes through real token verification and a real lookup.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def user(db_session):
    """A persisted customer whose password is "secret-pw"."""
    user = User(
        name="Ada",
        email="ada@example.com",
        password="secret-pw",
        avatar="avatars/ada.png",
        addresses=[],
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture()
async def admin(db_session):
    admin = User(
        name="Root",
        email="root@example.com",
        password="admin-pw",
        avatar="avatars/root.png",
        role="admin",
        addresses=[],
    )
    db_session.add(admin)
    await db_session.commit()
    return admin


@pytest_asyncio.fixture()
async def shop(db_session):
    """A persisted seller whose password is "shop-secret"."""
    shop = Shop(
        name="Corner Shop",
        email="shop@example.com",
        password="shop-secret",
        avatar="avatars/shop.png",
        address="1 Market St",
        phone_number="5550100",
        zip_code="94110",
    )
    db_session.add(shop)
    await db_session.commit()
    return shop
