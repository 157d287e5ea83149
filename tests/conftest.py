"""
Pytest configuration and shared fixtures
"""
import os

os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.permissions import Principal, UserRole
from app.core.security import create_access_token
from app.database import Base, get_db
from app.main import app
from app.models.room import Room


@pytest.fixture
async def db_engine():
    """In-memory database engine"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Database session"""
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(db_session):
    """API client sharing the test session"""

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============== Principals ==============


@pytest.fixture
def admin():
    return Principal(id=uuid4(), role=UserRole.ADMIN)


@pytest.fixture
def resident():
    return Principal(id=uuid4(), role=UserRole.RESIDENT)


@pytest.fixture
def other_resident():
    return Principal(id=uuid4(), role=UserRole.RESIDENT)


def auth_headers_for(principal: Principal) -> dict[str, str]:
    token = create_access_token(str(principal.id), principal.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    """Build bearer headers for any principal"""
    return auth_headers_for


@pytest.fixture
def admin_headers(admin):
    return auth_headers_for(admin)


@pytest.fixture
def resident_headers(resident):
    return auth_headers_for(resident)


@pytest.fixture
def other_resident_headers(other_resident):
    return auth_headers_for(other_resident)


# ============== Entities ==============


@pytest.fixture
def stay_dates() -> tuple[date, date]:
    """A 30-day stay starting next week"""
    start = datetime.now(UTC).date() + timedelta(days=7)
    return start, start + timedelta(days=30)


async def make_room(db_session, number: str = "101", capacity: int = 2, **kwargs) -> Room:
    room = Room(
        number=number,
        floor=kwargs.pop("floor", 1),
        capacity=capacity,
        room_type=kwargs.pop("room_type", "Double"),
        monthly_rate=kwargs.pop("monthly_rate", Decimal("3000")),
        status=kwargs.pop("status", "available"),
        occupied_count=kwargs.pop("occupied_count", 0),
        description="",
        amenities=[],
        images=[],
        **kwargs,
    )
    db_session.add(room)
    await db_session.commit()
    return room


@pytest.fixture
def room_factory(db_session):
    """Create rooms in the test session"""

    async def factory(number: str = "101", capacity: int = 2, **kwargs) -> Room:
        return await make_room(db_session, number, capacity, **kwargs)

    return factory


@pytest.fixture
async def room(db_session):
    """Double room, 3000 per month"""
    return await make_room(db_session)


@pytest.fixture
async def single_room(db_session):
    """Single room, capacity 1"""
    return await make_room(db_session, number="201", capacity=1, floor=2, room_type="Single")
