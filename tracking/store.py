"""
SQLAlchemy-backed store for tracked orders and their checkpoints
"""

from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import AsyncIterator, List, Optional
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from models.base import OrderStatus
from models.tracked_order import TrackedOrder
from models.order_checkpoint import OrderCheckpoint
from schemas.tracking import (
    TrackedOrderCreate,
    TrackedOrderRead,
    OrderCheckpointCreate,
    OrderCheckpointRead,
)
from core.exceptions import (
    StoreError,
    PersistenceError,
    TrackedOrderNotFoundError,
    CheckpointNotFoundError,
)
import logging

logger = logging.getLogger(__name__)


class CheckpointStore:
    """
    Persistence for TrackedOrder and OrderCheckpoint rows.

    Every call opens its own session from the factory and closes it before
    returning, so no connection outlives a single operation. Results are
    returned as Pydantic schemas detached from the session.

    The store enforces no business rules: keeping current_status in sync with
    the checkpoint history is the orchestrator's job.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str, table_name: str) -> AsyncIterator[AsyncSession]:
        """Open a session for one operation, translating driver errors"""
        async with self.session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"{operation} on {table_name} failed: {str(e)}")
                raise PersistenceError(
                    f"Database {operation} failed",
                    context={"operation": operation, "table_name": table_name},
                    original_exception=e
                )

    # ------------------------------------------------------------------
    # Tracked orders
    # ------------------------------------------------------------------

    async def create_tracked_order(self, order: TrackedOrderCreate) -> int:
        """Insert a tracked order and return its new id"""
        async with self._session("INSERT", "tracked_orders") as session:
            row = TrackedOrder(
                order_id=order.order_id,
                current_status=order.current_status,
                estimated_delivery_date=order.estimated_delivery_date,
                delivery_address=order.delivery_address
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)

        if not row.tracked_order_id or row.tracked_order_id <= 0:
            raise StoreError(
                "Unexpected error when trying to add the tracked order",
                context={"order_id": order.order_id}
            )

        logger.info(f"Created tracked order {row.tracked_order_id} for order {order.order_id}")
        return row.tracked_order_id

    async def get_tracked_order_by_id(self, tracked_order_id: int) -> TrackedOrderRead:
        """Load a tracked order; raises TrackedOrderNotFoundError when missing"""
        async with self._session("SELECT", "tracked_orders") as session:
            row = await session.get(TrackedOrder, tracked_order_id)
            if row is None:
                raise TrackedOrderNotFoundError(
                    f"No tracked order with id: {tracked_order_id}",
                    context={"tracked_order_id": tracked_order_id}
                )
            return TrackedOrderRead.from_orm(row)

    async def update_tracked_order(
        self,
        tracked_order_id: int,
        estimated_delivery_date: date,
        status: OrderStatus,
        delivery_address: Optional[str] = None
    ) -> None:
        """Update delivery date and status (and the address when given)"""
        async with self._session("UPDATE", "tracked_orders") as session:
            row = await session.get(TrackedOrder, tracked_order_id)
            if row is None:
                raise TrackedOrderNotFoundError(
                    f"No tracked order with id: {tracked_order_id}",
                    context={"tracked_order_id": tracked_order_id}
                )

            row.estimated_delivery_date = estimated_delivery_date
            row.current_status = status
            if delivery_address is not None:
                row.delivery_address = delivery_address
            row.updated_at = datetime.utcnow()

            await session.commit()

        logger.debug(f"Tracked order {tracked_order_id} set to {status.value}")

    async def delete_tracked_order(self, tracked_order_id: int) -> bool:
        """Delete a tracked order; True when a row was removed"""
        async with self._session("DELETE", "tracked_orders") as session:
            result = await session.execute(
                delete(TrackedOrder).where(TrackedOrder.tracked_order_id == tracked_order_id)
            )
            await session.commit()
            return result.rowcount > 0

    async def list_tracked_orders(self) -> List[TrackedOrderRead]:
        """All tracked orders"""
        async with self._session("SELECT", "tracked_orders") as session:
            result = await session.execute(
                select(TrackedOrder).order_by(TrackedOrder.tracked_order_id)
            )
            return [TrackedOrderRead.from_orm(row) for row in result.scalars().all()]

    # ------------------------------------------------------------------
    # Checkpoints
    # ------------------------------------------------------------------

    async def create_order_checkpoint(self, checkpoint: OrderCheckpointCreate) -> int:
        """Append a checkpoint and return its new id"""
        async with self._session("INSERT", "order_checkpoints") as session:
            row = OrderCheckpoint(
                tracked_order_id=checkpoint.tracked_order_id,
                status=checkpoint.status,
                timestamp=checkpoint.timestamp,
                location=checkpoint.location,
                description=checkpoint.description
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)

        if not row.checkpoint_id or row.checkpoint_id <= 0:
            raise StoreError(
                "Unexpected error when trying to add the order checkpoint",
                context={"tracked_order_id": checkpoint.tracked_order_id}
            )

        logger.info(
            f"Created checkpoint {row.checkpoint_id} ({checkpoint.status.value}) "
            f"for tracked order {checkpoint.tracked_order_id}"
        )
        return row.checkpoint_id

    async def get_order_checkpoint_by_id(self, checkpoint_id: int) -> OrderCheckpointRead:
        """Load a checkpoint; raises CheckpointNotFoundError when missing"""
        async with self._session("SELECT", "order_checkpoints") as session:
            row = await session.get(OrderCheckpoint, checkpoint_id)
            if row is None:
                raise CheckpointNotFoundError(
                    f"No order checkpoint with id: {checkpoint_id}",
                    context={"checkpoint_id": checkpoint_id}
                )
            return OrderCheckpointRead.from_orm(row)

    async def update_order_checkpoint(
        self,
        checkpoint_id: int,
        timestamp: datetime,
        location: Optional[str],
        description: str,
        status: OrderStatus
    ) -> None:
        """Overwrite the mutable fields of a checkpoint"""
        async with self._session("UPDATE", "order_checkpoints") as session:
            row = await session.get(OrderCheckpoint, checkpoint_id)
            if row is None:
                raise CheckpointNotFoundError(
                    f"No order checkpoint with id: {checkpoint_id}",
                    context={"checkpoint_id": checkpoint_id}
                )

            row.timestamp = timestamp
            row.location = location
            row.description = description
            row.status = status

            await session.commit()

    async def delete_order_checkpoint(self, checkpoint_id: int) -> bool:
        """Delete a checkpoint; True when a row was removed"""
        async with self._session("DELETE", "order_checkpoints") as session:
            result = await session.execute(
                delete(OrderCheckpoint).where(OrderCheckpoint.checkpoint_id == checkpoint_id)
            )
            await session.commit()
            return result.rowcount > 0

    async def list_order_checkpoints(self, tracked_order_id: int) -> List[OrderCheckpointRead]:
        """Checkpoints of a tracked order, oldest first"""
        async with self._session("SELECT", "order_checkpoints") as session:
            result = await session.execute(
                select(OrderCheckpoint)
                .where(OrderCheckpoint.tracked_order_id == tracked_order_id)
                .order_by(OrderCheckpoint.checkpoint_id)
            )
            return [OrderCheckpointRead.from_orm(row) for row in result.scalars().all()]
