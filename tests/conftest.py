"""Test configuration and fixtures"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from uuid import uuid4

from app.main import app
from app.database import Base, get_db
from app.models.table import Table
from app.models.user import User, UserRole
from app.notifications import get_notifier
from app.api.auth import create_access_token, get_password_hash


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingNotifier:
    """Collects notifications instead of queueing them"""

    def __init__(self):
        self.sent = []

    async def send(self, kind, payload):
        self.sent.append((kind, payload))

    @property
    def kinds(self):
        return [kind.value for kind, _ in self.sent]


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


async def _create_user(db, email, role, full_name, phone=None):
    user = User(
        id=uuid4(),
        email=email,
        hashed_password=get_password_hash("testpass123"),
        full_name=full_name,
        phone=phone,
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def customer(test_db):
    """Create a customer"""
    return await _create_user(
        test_db, "guest@example.com", UserRole.CUSTOMER, "Ada Guest", phone="+15550001111"
    )


@pytest.fixture
async def other_customer(test_db):
    return await _create_user(test_db, "other@example.com", UserRole.CUSTOMER, "Bo Other")


@pytest.fixture
async def staff_user(test_db):
    return await _create_user(test_db, "host@example.com", UserRole.STAFF, "Front Host")


@pytest.fixture
async def admin_user(test_db):
    """Create an admin"""
    return await _create_user(test_db, "admin@example.com", UserRole.ADMIN, "Admin User")


@pytest.fixture
async def tables(test_db):
    """Two-top, four-top, six-top and an out-of-service four-top"""
    items = [
        Table(id=uuid4(), table_number="T2", capacity=2, location="window"),
        Table(id=uuid4(), table_number="T4", capacity=4, location="main room"),
        Table(id=uuid4(), table_number="T6", capacity=6, location="patio"),
        Table(id=uuid4(), table_number="X4", capacity=4, is_available=False),
    ]
    for item in items:
        test_db.add(item)
    await test_db.commit()
    return {item.table_number: item for item in items}


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
async def client(test_db, notifier):
    """Create test client with overridden database and notifier"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def other_headers(other_customer):
    return auth_headers(other_customer)


@pytest.fixture
def staff_headers(staff_user):
    return auth_headers(staff_user)


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)
