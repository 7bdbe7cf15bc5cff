"""
FastAPI dependencies
"""

from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import async_session_maker, get_session
from tracking.store import CheckpointStore
from tracking.order_lookup import HTTPOrderLookup
from tracking.notifications import HTTPNotificationSender
from tracking.orchestrator import TrackedOrderOrchestrator


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped database session"""
    async for session in get_session():
        yield session


def get_orchestrator() -> TrackedOrderOrchestrator:
    """Orchestrator wired with the production collaborators"""
    return TrackedOrderOrchestrator(
        store=CheckpointStore(async_session_maker),
        order_lookup=HTTPOrderLookup(),
        notification_sender=HTTPNotificationSender()
    )
