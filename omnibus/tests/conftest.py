"""
Centralized Test Configuration.
"""

import os
import tempfile
import pytest
from datetime import date, timedelta
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, NullPool

from omnibus.app.main import app
from omnibus.app.db.session import get_db, Base
from omnibus.app.models.enums import UserType
from omnibus.tests.factories import create_user, create_network
import omnibus.app.core.redis_client as redis_client_module

# File-backed SQLite so concurrently open sessions see each other's commits
TEST_DB_PATH = os.path.join(tempfile.mkdtemp(prefix="omnibus-tests-"), "test.db")
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{TEST_DB_PATH}"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False, "timeout": 30},
    poolclass=NullPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


@pytest.fixture(scope="session")
def redis_client_session():
    return MockRedis()


@pytest.fixture(scope="session", autouse=True)
def apply_overrides(redis_client_session):
    """Apply overrides once for the session."""
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = redis_client_session

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield

    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client


@pytest.fixture(autouse=True)
async def setup_database(redis_client_session):
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await redis_client_session.flushdb()

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
async def passenger(db_session):
    return await create_user(db_session, "pat_passenger", UserType.PASSENGER)


@pytest.fixture
async def other_passenger(db_session):
    return await create_user(db_session, "olive_passenger", UserType.PASSENGER)


@pytest.fixture
async def driver(db_session):
    return await create_user(db_session, "dan_driver", UserType.DRIVER)


@pytest.fixture
async def other_driver(db_session):
    return await create_user(db_session, "dora_driver", UserType.DRIVER)


@pytest.fixture
async def admin(db_session):
    return await create_user(db_session, "ada_admin", UserType.ADMIN)


@pytest.fixture
async def schedule(db_session, driver):
    """Every-day schedule on a vehicle with 2 seats."""
    return await create_network(db_session, driver)


@pytest.fixture
def travel_date():
    return date.today() + timedelta(days=7)
