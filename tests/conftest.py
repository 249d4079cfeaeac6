"""Test configuration and fixtures"""

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from uuid import uuid4

from app.main import app
from app.database import Base, get_db
from app.models.user import User, UserRole
from app.api.auth import create_access_token, get_password_hash


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

BOOKING_DATE = date(2024, 6, 1)


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


async def _create_user(db, email: str, role: UserRole, **profile) -> User:
    user = User(
        id=uuid4(),
        email=email,
        hashed_password=get_password_hash("testpass123"),
        role=role,
        is_active=True,
        **profile,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def test_user(test_db):
    """Create a customer"""
    return await _create_user(
        test_db, "test@example.com", UserRole.CUSTOMER, first_name="Test", last_name="User"
    )


@pytest.fixture
async def other_user(test_db):
    """Create a second customer"""
    return await _create_user(test_db, "other@example.com", UserRole.CUSTOMER, first_name="Other")


@pytest.fixture
async def test_admin_user(test_db):
    """Create an admin user"""
    return await _create_user(test_db, "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def booking():
    """Factory for reservation creation payloads"""
    def _booking(table_type="Parasol", start="12:00", end="14:00", num_people=3, day=BOOKING_DATE):
        return {
            "table_type": table_type,
            "reservation_date": day.isoformat(),
            "start_time": start,
            "end_time": end,
            "num_people": num_people,
        }
    return _booking


@pytest.fixture
async def client(test_db):
    """Create test client with overridden database"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def user_headers(test_user):
    return auth_headers(test_user)


@pytest.fixture
def other_headers(other_user):
    return auth_headers(other_user)


@pytest.fixture
def admin_headers(test_admin_user):
    return auth_headers(test_admin_user)


@pytest.fixture
async def authenticated_client(client, test_user):
    """Create authenticated test client"""
    client.headers.update(auth_headers(test_user))
    return client


@pytest.fixture
async def admin_client(client, test_admin_user):
    """Create admin authenticated test client"""
    client.headers.update(auth_headers(test_admin_user))
    return client
