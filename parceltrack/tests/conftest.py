"""
Centralized Test Configuration.
"""

import pytest
from datetime import datetime
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from parceltrack.app.core.config import Settings
from parceltrack.app.db.session import Base, create_session_factory
from parceltrack.app.main import create_app
from parceltrack.app.models.parcel_enums import ParcelStatus
from parceltrack.app.schemas.parcel import ParcelCreate
from parceltrack.app.services.parcel_store import ParcelStore

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

CREATED_AT = datetime(2024, 3, 15, 10, 30, 0)


@pytest.fixture
async def engine():
    """Fresh in-memory database per test, tables created before and dropped after."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
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
async def db_session(engine):
    session_factory = create_session_factory(engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session):
    return ParcelStore(db_session)


@pytest.fixture
async def client(engine):
    """Async client for testing."""
    app = create_app(Settings(database_url=TEST_DATABASE_URL), engine=engine)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def make_parcel(client: int = 1000, address: str = "Moscow, Lenina 1", status: str = ParcelStatus.REGISTERED.value) -> ParcelCreate:
    return ParcelCreate(client=client, status=status, address=address, created_at=CREATED_AT)


@pytest.fixture
def parcel_factory():
    return make_parcel
