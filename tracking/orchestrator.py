# ============================================================================
# File: tracking/orchestrator.py
# Description: Tracked-order checkpoint management and reversion
# ============================================================================
"""
Tracked-Order Orchestrator - business rules on top of the checkpoint store.

Responsibilities:
- Keep TrackedOrder.current_status equal to the status of the current
  (most recent) checkpoint after every checkpoint mutation
- Revert shipment progress, destructively or by re-applying the last status
- Notify buyers about shipping milestones, best-effort

Failure contracts differ per entry point and callers rely on them:

    Propagate        add_tracked_order, add_order_checkpoint,
                     update_order_checkpoint, update_tracked_order,
                     revert_to_previous_checkpoint
    Bool + swallow   update_owned_order_checkpoint,
                     update_owned_tracked_order, revert_to_last_checkpoint
    None on failure  get_tracked_order_by_id, get_order_checkpoint_by_id

Notification failures are swallowed everywhere.
"""

from datetime import date, datetime
from typing import List, Optional
import logging

from models.base import OrderStatus
from schemas.tracking import (
    TrackedOrderCreate,
    TrackedOrderRead,
    OrderCheckpointCreate,
    OrderCheckpointRead,
)
from tracking.store import CheckpointStore
from tracking.order_lookup import OrderLookup
from tracking.notifications import NotificationSender
from core.config import settings
from core.exceptions import ReversionError

logger = logging.getLogger(__name__)


# Statuses the buyer hears about when a checkpoint is appended
SHIPPING_MILESTONES = frozenset({
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
})


def is_shipping_milestone(status: OrderStatus) -> bool:
    """True when reaching ``status`` warrants a buyer notification"""
    return status in SHIPPING_MILESTONES


class TrackedOrderOrchestrator:
    """
    Single entry point for tracked-order and checkpoint mutations.

    Collaborators are injected; the orchestrator holds no state of its own
    between calls and does not serialize concurrent callers working on the
    same tracked order.
    """

    def __init__(
        self,
        store: CheckpointStore,
        order_lookup: OrderLookup,
        notification_sender: NotificationSender,
        notify_on_direct_status_update: Optional[bool] = None
    ):
        self.store = store
        self.order_lookup = order_lookup
        self.notification_sender = notification_sender
        if notify_on_direct_status_update is None:
            notify_on_direct_status_update = settings.NOTIFY_ON_DIRECT_STATUS_UPDATE
        self.notify_on_direct_status_update = notify_on_direct_status_update

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    async def get_tracked_order_by_id(self, tracked_order_id: int) -> Optional[TrackedOrderRead]:
        try:
            return await self.store.get_tracked_order_by_id(tracked_order_id)
        except Exception as e:
            logger.info(f"Tracked order {tracked_order_id} unavailable: {str(e)}")
            return None

    async def get_order_checkpoint_by_id(self, checkpoint_id: int) -> Optional[OrderCheckpointRead]:
        try:
            return await self.store.get_order_checkpoint_by_id(checkpoint_id)
        except Exception as e:
            logger.info(f"Order checkpoint {checkpoint_id} unavailable: {str(e)}")
            return None

    async def get_all_tracked_orders(self) -> List[TrackedOrderRead]:
        return await self.store.list_tracked_orders()

    async def get_all_order_checkpoints(self, tracked_order_id: int) -> List[OrderCheckpointRead]:
        return await self.store.list_order_checkpoints(tracked_order_id)

    async def delete_tracked_order(self, tracked_order_id: int) -> bool:
        return await self.store.delete_tracked_order(tracked_order_id)

    async def delete_order_checkpoint(self, checkpoint_id: int) -> bool:
        return await self.store.delete_order_checkpoint(checkpoint_id)

    async def get_last_checkpoint(self, tracked_order: TrackedOrderRead) -> Optional[OrderCheckpointRead]:
        """Current checkpoint of the tracked order, or None without history"""
        checkpoints = await self.get_all_order_checkpoints(tracked_order.tracked_order_id)
        return checkpoints[-1] if checkpoints else None

    async def get_number_of_checkpoints(self, tracked_order: TrackedOrderRead) -> int:
        checkpoints = await self.get_all_order_checkpoints(tracked_order.tracked_order_id)
        return len(checkpoints)

    # ------------------------------------------------------------------
    # Mutations (exceptions propagate)
    # ------------------------------------------------------------------

    async def add_tracked_order(self, order: TrackedOrderCreate) -> int:
        """
        Create a tracked order and tell the buyer about its initial status.

        Returns:
            Id of the new tracked order

        Raises:
            StoreError: if the tracked order cannot be created
        """
        tracked_order_id = await self.store.create_tracked_order(order)

        await self._notify_buyer(
            tracked_order_id=tracked_order_id,
            order_id=order.order_id,
            status=order.current_status,
            estimated_delivery_date=order.estimated_delivery_date
        )

        return tracked_order_id

    async def add_order_checkpoint(self, checkpoint: OrderCheckpointCreate) -> int:
        """
        Append a checkpoint and make its status the tracked order's current
        status. Shipping milestones are announced to the buyer.

        Returns:
            Id of the new checkpoint

        Raises:
            StoreError: if the checkpoint cannot be created or the tracked
                order cannot be loaded or updated
        """
        checkpoint_id = await self.store.create_order_checkpoint(checkpoint)

        tracked_order = await self.store.get_tracked_order_by_id(checkpoint.tracked_order_id)
        await self.store.update_tracked_order(
            tracked_order.tracked_order_id,
            tracked_order.estimated_delivery_date,
            checkpoint.status
        )

        if is_shipping_milestone(checkpoint.status):
            await self._notify_buyer(
                tracked_order_id=tracked_order.tracked_order_id,
                order_id=tracked_order.order_id,
                status=checkpoint.status,
                estimated_delivery_date=tracked_order.estimated_delivery_date
            )

        return checkpoint_id

    async def update_order_checkpoint(
        self,
        checkpoint_id: int,
        timestamp: datetime,
        location: Optional[str],
        description: str,
        status: OrderStatus
    ) -> None:
        """
        Amend a checkpoint and sync the owning tracked order to ``status``.

        Raises:
            StoreError: on any store failure
        """
        await self.store.update_order_checkpoint(checkpoint_id, timestamp, location, description, status)

        updated_checkpoint = await self.store.get_order_checkpoint_by_id(checkpoint_id)
        tracked_order = await self.store.get_tracked_order_by_id(updated_checkpoint.tracked_order_id)

        await self.store.update_tracked_order(
            tracked_order.tracked_order_id,
            tracked_order.estimated_delivery_date,
            status
        )

    async def update_tracked_order(
        self,
        tracked_order_id: int,
        estimated_delivery_date: date,
        status: OrderStatus
    ) -> None:
        """
        Set delivery date and status directly.

        Unlike update_owned_tracked_order this sends no notification, unless
        notify_on_direct_status_update is enabled and ``status`` is a
        shipping milestone.

        Raises:
            StoreError: on any store failure
        """
        await self.store.update_tracked_order(tracked_order_id, estimated_delivery_date, status)

        if self.notify_on_direct_status_update and is_shipping_milestone(status):
            tracked_order = await self.get_tracked_order_by_id(tracked_order_id)
            if tracked_order is not None:
                await self._notify_buyer(
                    tracked_order_id=tracked_order_id,
                    order_id=tracked_order.order_id,
                    status=status,
                    estimated_delivery_date=estimated_delivery_date
                )

    # ------------------------------------------------------------------
    # Ownership-checked mutations (bool result, exceptions swallowed)
    # ------------------------------------------------------------------

    async def update_owned_order_checkpoint(
        self,
        checkpoint_id: int,
        timestamp: datetime,
        location: Optional[str],
        description: str,
        status: OrderStatus,
        expected_tracked_order_id: int
    ) -> bool:
        """
        Amend a checkpoint only if it belongs to ``expected_tracked_order_id``.

        Returns:
            True when the checkpoint was updated, False on ownership mismatch
            or any failure
        """
        try:
            checkpoint = await self.store.get_order_checkpoint_by_id(checkpoint_id)
            if checkpoint.tracked_order_id != expected_tracked_order_id:
                logger.warning(
                    f"Checkpoint {checkpoint_id} belongs to tracked order "
                    f"{checkpoint.tracked_order_id}, not {expected_tracked_order_id}"
                )
                return False

            await self.store.update_order_checkpoint(checkpoint_id, timestamp, location, description, status)

            # Only the current checkpoint drives current_status
            current = await self._last_of(checkpoint.tracked_order_id)
            if current is not None and current.checkpoint_id == checkpoint_id:
                tracked_order = await self.store.get_tracked_order_by_id(checkpoint.tracked_order_id)
                await self.store.update_tracked_order(
                    tracked_order.tracked_order_id,
                    tracked_order.estimated_delivery_date,
                    status
                )

            return True

        except Exception as e:
            logger.error(f"Failed to update order checkpoint {checkpoint_id}: {str(e)}")
            return False

    async def update_owned_tracked_order(
        self,
        tracked_order_id: int,
        estimated_delivery_date: date,
        delivery_address: str,
        status: OrderStatus,
        expected_order_id: int
    ) -> bool:
        """
        Update a tracked order only if it tracks ``expected_order_id``, then
        notify the buyer.

        Returns:
            True when the tracked order was updated (whatever happened to the
            notification), False on ownership mismatch or store failure
        """
        try:
            tracked_order = await self.store.get_tracked_order_by_id(tracked_order_id)
            if tracked_order.order_id != expected_order_id:
                logger.warning(
                    f"Tracked order {tracked_order_id} tracks order "
                    f"{tracked_order.order_id}, not {expected_order_id}"
                )
                return False

            await self.store.update_tracked_order(
                tracked_order_id,
                estimated_delivery_date,
                status,
                delivery_address=delivery_address
            )

        except Exception as e:
            logger.error(f"Failed to update tracked order {tracked_order_id}: {str(e)}")
            return False

        await self._notify_buyer(
            tracked_order_id=tracked_order_id,
            order_id=tracked_order.order_id,
            status=status,
            estimated_delivery_date=estimated_delivery_date
        )
        return True

    # ------------------------------------------------------------------
    # Reversion
    # ------------------------------------------------------------------

    async def revert_to_previous_checkpoint(self, tracked_order: Optional[TrackedOrderRead]) -> None:
        """
        Remove the current checkpoint and fall back to the one before it.

        When the removed checkpoint was the only one, current_status is left
        as it is.

        Raises:
            ValueError: if ``tracked_order`` is None
            ReversionError: if there is no checkpoint to remove or the store
                did not delete it
            StoreError: on any store failure
        """
        if tracked_order is None:
            raise ValueError("tracked_order must not be None")

        tracked_order_id = tracked_order.tracked_order_id
        current_checkpoint = await self._last_of(tracked_order_id)

        if current_checkpoint is None:
            raise ReversionError(
                "Cannot revert a tracked order without checkpoints",
                context={"tracked_order_id": tracked_order_id}
            )

        deleted = await self.store.delete_order_checkpoint(current_checkpoint.checkpoint_id)
        if not deleted:
            raise ReversionError(
                "Unexpected error when trying to delete the current checkpoint",
                context={
                    "tracked_order_id": tracked_order_id,
                    "checkpoint_id": current_checkpoint.checkpoint_id
                }
            )

        previous_checkpoint = await self._last_of(tracked_order_id)
        if previous_checkpoint is None:
            logger.info(f"Tracked order {tracked_order_id} has no checkpoints left after reversion")
            return

        await self.update_tracked_order(
            tracked_order_id,
            tracked_order.estimated_delivery_date,
            previous_checkpoint.status
        )

        logger.info(
            f"Reverted tracked order {tracked_order_id} from checkpoint "
            f"{current_checkpoint.checkpoint_id} to {previous_checkpoint.status.value}"
        )

    async def revert_to_last_checkpoint(self, tracked_order: Optional[TrackedOrderRead]) -> bool:
        """
        Re-apply the last checkpoint's status to the tracked order without
        touching the checkpoint history.

        Returns:
            True when the status was written, False for a missing tracked
            order, an empty history or any failure
        """
        if tracked_order is None:
            return False

        try:
            last_checkpoint = await self._last_of(tracked_order.tracked_order_id)
            if last_checkpoint is None:
                return False

            await self.store.update_tracked_order(
                tracked_order.tracked_order_id,
                tracked_order.estimated_delivery_date,
                last_checkpoint.status
            )
            return True

        except Exception as e:
            logger.error(
                f"Failed to re-apply last checkpoint of tracked order "
                f"{tracked_order.tracked_order_id}: {str(e)}"
            )
            return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _last_of(self, tracked_order_id: int) -> Optional[OrderCheckpointRead]:
        checkpoints = await self.store.list_order_checkpoints(tracked_order_id)
        return checkpoints[-1] if checkpoints else None

    async def _notify_buyer(
        self,
        tracked_order_id: int,
        order_id: int,
        status: OrderStatus,
        estimated_delivery_date: date
    ) -> None:
        """Resolve the buyer of ``order_id`` and notify them. Never raises."""
        try:
            order = await self.order_lookup.get_order_by_id(order_id)
            delivery_timestamp = datetime.combine(estimated_delivery_date, datetime.now().time())
            await self.notification_sender.send_shipping_progress_notification(
                order.buyer_id,
                tracked_order_id,
                status.value,
                delivery_timestamp
            )
        except Exception as e:
            logger.warning(
                f"Shipping notification for tracked order {tracked_order_id} "
                f"could not be sent: {str(e)}"
            )
