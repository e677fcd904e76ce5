"""Test fixtures — a fresh in-memory database and registry per test.

Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own sqlite+aiosqlite in-memory engine with the schema
   created from the ORM models (StaticPool keeps the single connection alive).
2. The app's get_db dependency yields that session.
3. The app's get_registry dependency yields a fresh ChannelRegistry, so tests
   can put recording subscribers in rooms and see what a submit publishes.
"""

from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from complimentbox.api.dependencies import get_registry
from complimentbox.db.engine import get_db
from complimentbox.db.models import Base
from complimentbox.errors import DeliveryFault
from complimentbox.main import app
from complimentbox.realtime.registry import ChannelRegistry

TEST_DB_URL = "sqlite+aiosqlite://"


class RecordingSubscriber:
    """Stands in for a live connection; remembers every delivered event."""

    def __init__(self, connection_id: str, fail: bool = False):
        self.connection_id = connection_id
        self.fail = fail
        self.events: list[tuple[str, Any]] = []
        self.closed = False

    def deliver(self, event: str, data: Any) -> None:
        if self.fail:
            raise DeliveryFault(f"{self.connection_id} reset by peer")
        self.events.append((event, data))

    async def close(self) -> None:
        self.closed = True


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session on a brand-new in-memory database."""
    engine = create_async_engine(TEST_DB_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = AsyncSession(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest.fixture()
def registry():
    return ChannelRegistry()


@pytest.fixture()
def subscriber_in(registry):
    """Attach a recording subscriber and join it to a room."""

    def _make(connection_id: str, code: str | None = None, fail: bool = False):
        sub = RecordingSubscriber(connection_id, fail=fail)
        registry.attach(sub)
        if code is not None:
            registry.join(connection_id, code)
        return sub

    return _make


@pytest_asyncio.fixture()
async def client(db_session, registry):
    """HTTP client with the app's get_db and get_registry overridden."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_registry] = lambda: registry

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
