"""
Pytest configuration and fixtures
"""

import os

# Settings are read at import time; keep tests off Postgres and the scheduler
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["RECONCILE_ENABLED"] = "false"
os.environ["NOTIFY_ON_DIRECT_STATUS_UPDATE"] = "false"

import pytest
import pytest_asyncio
from datetime import date, datetime
from typing import AsyncGenerator
from unittest.mock import AsyncMock
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from models.base import Base, OrderStatus
from schemas.tracking import TrackedOrderRead, OrderCheckpointRead, OrderInfo
from tracking.store import CheckpointStore
from tracking.orchestrator import TrackedOrderOrchestrator

# In-memory database shared by every connection of the engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the test engine"""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def store(session_factory):
    """Checkpoint store backed by the in-memory database"""
    return CheckpointStore(session_factory)


# ============================================================================
# Mocked collaborators
# ============================================================================

@pytest.fixture
def mock_store():
    """Checkpoint store with every method an AsyncMock"""
    return AsyncMock(spec=CheckpointStore)


@pytest.fixture
def mock_order_lookup():
    """Order lookup resolving every order to buyer 789"""
    lookup = AsyncMock()
    lookup.get_order_by_id.return_value = OrderInfo(order_id=456, buyer_id=789)
    return lookup


@pytest.fixture
def mock_notification_sender():
    return AsyncMock()


@pytest.fixture
def orchestrator(mock_store, mock_order_lookup, mock_notification_sender):
    """Orchestrator over mocked collaborators"""
    return TrackedOrderOrchestrator(
        store=mock_store,
        order_lookup=mock_order_lookup,
        notification_sender=mock_notification_sender,
        notify_on_direct_status_update=False
    )


# ============================================================================
# Sample data
# ============================================================================

@pytest.fixture
def tracked_order():
    """Tracked order 123 for order 456"""
    return TrackedOrderRead(
        tracked_order_id=123,
        order_id=456,
        current_status=OrderStatus.SHIPPED,
        estimated_delivery_date=date(2025, 5, 1),
        delivery_address="123 Test St"
    )


@pytest.fixture
def checkpoints():
    """PROCESSING then SHIPPED checkpoints of tracked order 123"""
    return [
        OrderCheckpointRead(
            checkpoint_id=1,
            tracked_order_id=123,
            status=OrderStatus.PROCESSING,
            timestamp=datetime(2025, 4, 1),
            location="Warehouse A",
            description="Order received"
        ),
        OrderCheckpointRead(
            checkpoint_id=2,
            tracked_order_id=123,
            status=OrderStatus.SHIPPED,
            timestamp=datetime(2025, 4, 2),
            location="Warehouse A",
            description="Handed over to the courier"
        ),
    ]
