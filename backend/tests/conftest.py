"""Shared fixtures: in-memory SQLite database, ASGI client and authenticated users."""
import itertools
import os
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import calculette.models  # noqa: F401
from calculette.auth.jwt import create_access_token, get_password_hash
from calculette.auth.rbac import ROLE_NAMES
from calculette.database import Base, get_db
from calculette.main import app
from calculette.models.client import Client
from calculette.models.salary_settings import GlobalSalarySettings
from calculette.models.user import Role, User, UserRole


@pytest_asyncio.fixture
async def session_maker():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as db:
        for name in ROLE_NAMES:
            db.add(Role(name=name, description=name))
        await db.commit()
    yield maker
    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_user(session_maker):
    """Factory returning Authorization headers for a new user with the given roles."""
    counter = itertools.count(1)

    async def _make(*role_names: str) -> dict:
        n = next(counter)
        async with session_maker() as db:
            user = User(
                email=f"user{n}@calculette.local",
                hashed_password=get_password_hash("secret"),
                full_name=f"User {n}",
            )
            db.add(user)
            await db.flush()
            roles = (await db.execute(select(Role).where(Role.name.in_(role_names)))).scalars().all()
            for role in roles:
                db.add(UserRole(user_id=user.id, role_id=role.id))
            await db.commit()
            return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _make


@pytest_asyncio.fixture
async def cfo_headers(make_user):
    return await make_user("cfo")


@pytest_asyncio.fixture
async def account_manager_headers(make_user):
    return await make_user("account_manager")


@pytest_asyncio.fixture
async def viewer_headers(make_user):
    return await make_user("viewer")


@pytest_asyncio.fixture
async def role_ids(session_maker):
    async with session_maker() as db:
        result = await db.execute(select(Role))
        return {r.name: r.id for r in result.scalars().all()}


@pytest_asyncio.fixture
async def active_settings(session_maker):
    """Active global salary settings: 65 % charges, 5000 indirect, 1600 hours."""
    async with session_maker() as db:
        settings = GlobalSalarySettings(
            label="Reference",
            employer_charges_rate=Decimal("65"),
            indirect_annual_costs=Decimal("5000"),
            billable_hours_per_year=1600,
            is_active=True,
        )
        db.add(settings)
        await db.commit()
        return settings.id


FULL_COMMERCIAL_CONFIG = dict(
    target_margin_percent=Decimal("25"),
    minimum_margin_percent=Decimal("15"),
    discount_percent=Decimal("10"),
    forced_vacation_days_per_year=5,
    target_hourly_rate=Decimal("120"),
)


@pytest_asyncio.fixture
async def make_client(session_maker):
    """Factory inserting a client directly; returns its id."""

    async def _make(code: str, name: str | None = None, **commercial) -> int:
        async with session_maker() as db:
            client = Client(code=code, name=name or code.title(), is_active=True, **commercial)
            db.add(client)
            await db.commit()
            return client.id

    return _make


@pytest_asyncio.fixture
async def configured_client(make_client):
    return await make_client("ACME", "Acme Corp", **FULL_COMMERCIAL_CONFIG)
