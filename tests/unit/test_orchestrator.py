"""
Unit tests for tracked-order mutations, status sync and notifications
"""

import pytest
from datetime import date, datetime
from unittest.mock import ANY
from models.base import OrderStatus
from schemas.tracking import TrackedOrderCreate, OrderCheckpointCreate, OrderCheckpointRead
from tracking.orchestrator import TrackedOrderOrchestrator, SHIPPING_MILESTONES, is_shipping_milestone
from core.exceptions import (
    PersistenceError,
    TrackedOrderNotFoundError,
    CheckpointNotFoundError,
    OrderLookupError,
    NotificationError,
)


class TestShippingMilestones:
    """Membership of the notification-worthy status set"""

    def test_shipped_is_a_milestone(self):
        assert is_shipping_milestone(OrderStatus.SHIPPED)

    def test_processing_is_not_a_milestone(self):
        assert not is_shipping_milestone(OrderStatus.PROCESSING)

    def test_out_for_delivery_is_a_milestone(self):
        assert OrderStatus.OUT_FOR_DELIVERY in SHIPPING_MILESTONES


class TestReadAccessors:
    """Read accessors: None on failure, passthrough otherwise"""

    @pytest.mark.asyncio
    async def test_get_tracked_order_by_id_returns_order(self, orchestrator, mock_store, tracked_order):
        mock_store.get_tracked_order_by_id.return_value = tracked_order

        result = await orchestrator.get_tracked_order_by_id(123)

        assert result == tracked_order
        mock_store.get_tracked_order_by_id.assert_awaited_once_with(123)

    @pytest.mark.asyncio
    async def test_get_tracked_order_by_id_store_error_returns_none(self, orchestrator, mock_store):
        mock_store.get_tracked_order_by_id.side_effect = TrackedOrderNotFoundError("missing")

        assert await orchestrator.get_tracked_order_by_id(999) is None

    @pytest.mark.asyncio
    async def test_get_order_checkpoint_by_id_any_error_returns_none(self, orchestrator, mock_store):
        mock_store.get_order_checkpoint_by_id.side_effect = RuntimeError("connection reset")

        assert await orchestrator.get_order_checkpoint_by_id(1) is None

    @pytest.mark.asyncio
    async def test_get_order_checkpoint_by_id_returns_checkpoint(self, orchestrator, mock_store, checkpoints):
        mock_store.get_order_checkpoint_by_id.return_value = checkpoints[0]

        result = await orchestrator.get_order_checkpoint_by_id(1)

        assert result.checkpoint_id == 1
        assert result.status == OrderStatus.PROCESSING

    @pytest.mark.asyncio
    async def test_get_last_checkpoint(self, orchestrator, mock_store, tracked_order, checkpoints):
        mock_store.list_order_checkpoints.return_value = checkpoints

        result = await orchestrator.get_last_checkpoint(tracked_order)

        assert result.checkpoint_id == 2
        assert result.status == OrderStatus.SHIPPED
        mock_store.list_order_checkpoints.assert_awaited_once_with(123)

    @pytest.mark.asyncio
    async def test_get_last_checkpoint_without_history_is_none(self, orchestrator, mock_store, tracked_order):
        mock_store.list_order_checkpoints.return_value = []

        assert await orchestrator.get_last_checkpoint(tracked_order) is None

    @pytest.mark.asyncio
    async def test_get_number_of_checkpoints(self, orchestrator, mock_store, tracked_order, checkpoints):
        mock_store.list_order_checkpoints.return_value = checkpoints

        assert await orchestrator.get_number_of_checkpoints(tracked_order) == 2

    @pytest.mark.asyncio
    async def test_passthroughs(self, orchestrator, mock_store, tracked_order, checkpoints):
        mock_store.list_tracked_orders.return_value = [tracked_order]
        mock_store.list_order_checkpoints.return_value = checkpoints
        mock_store.delete_tracked_order.return_value = True
        mock_store.delete_order_checkpoint.return_value = False

        assert await orchestrator.get_all_tracked_orders() == [tracked_order]
        assert await orchestrator.get_all_order_checkpoints(123) == checkpoints
        assert await orchestrator.delete_tracked_order(123) is True
        assert await orchestrator.delete_order_checkpoint(2) is False

        mock_store.delete_tracked_order.assert_awaited_once_with(123)
        mock_store.delete_order_checkpoint.assert_awaited_once_with(2)

    @pytest.mark.asyncio
    async def test_passthrough_errors_propagate(self, orchestrator, mock_store):
        mock_store.list_tracked_orders.side_effect = PersistenceError("db down")

        with pytest.raises(PersistenceError):
            await orchestrator.get_all_tracked_orders()


class TestAddTrackedOrder:
    """add_tracked_order: store errors propagate, notifications never do"""

    @pytest.fixture
    def new_order(self):
        return TrackedOrderCreate(
            order_id=456,
            current_status=OrderStatus.PROCESSING,
            estimated_delivery_date=date(2025, 5, 1),
            delivery_address="123 Test St"
        )

    @pytest.mark.asyncio
    async def test_adds_order_and_notifies_buyer(
        self, orchestrator, mock_store, mock_order_lookup, mock_notification_sender, new_order
    ):
        mock_store.create_tracked_order.return_value = 123

        result = await orchestrator.add_tracked_order(new_order)

        assert result == 123
        mock_store.create_tracked_order.assert_awaited_once_with(new_order)
        mock_order_lookup.get_order_by_id.assert_awaited_once_with(456)
        mock_notification_sender.send_shipping_progress_notification.assert_awaited_once_with(
            789, 123, "PROCESSING", ANY
        )

    @pytest.mark.asyncio
    async def test_notification_timestamp_is_on_delivery_date(
        self, orchestrator, mock_store, mock_notification_sender, new_order
    ):
        mock_store.create_tracked_order.return_value = 123

        await orchestrator.add_tracked_order(new_order)

        delivery_timestamp = mock_notification_sender.send_shipping_progress_notification.call_args.args[3]
        assert isinstance(delivery_timestamp, datetime)
        assert delivery_timestamp.date() == date(2025, 5, 1)

    @pytest.mark.asyncio
    async def test_notification_failure_still_returns_new_id(
        self, orchestrator, mock_store, mock_notification_sender, new_order
    ):
        mock_store.create_tracked_order.return_value = 123
        mock_notification_sender.send_shipping_progress_notification.side_effect = NotificationError("down")

        assert await orchestrator.add_tracked_order(new_order) == 123

    @pytest.mark.asyncio
    async def test_order_lookup_failure_still_returns_new_id(
        self, orchestrator, mock_store, mock_order_lookup, mock_notification_sender, new_order
    ):
        mock_store.create_tracked_order.return_value = 123
        mock_order_lookup.get_order_by_id.side_effect = OrderLookupError("unknown order")

        assert await orchestrator.add_tracked_order(new_order) == 123
        mock_notification_sender.send_shipping_progress_notification.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, orchestrator, mock_store, mock_order_lookup, new_order):
        mock_store.create_tracked_order.side_effect = PersistenceError("insert failed")

        with pytest.raises(PersistenceError):
            await orchestrator.add_tracked_order(new_order)

        mock_order_lookup.get_order_by_id.assert_not_awaited()


class TestAddOrderCheckpoint:
    """add_order_checkpoint: status sync and milestone notifications"""

    @pytest.mark.asyncio
    async def test_shipped_checkpoint_syncs_status_and_notifies_once(
        self, orchestrator, mock_store, mock_order_lookup, mock_notification_sender, tracked_order
    ):
        checkpoint = OrderCheckpointCreate(
            tracked_order_id=123,
            status=OrderStatus.SHIPPED,
            timestamp=datetime(2025, 4, 2),
            location="Warehouse A",
            description="Handed over to the courier"
        )
        mock_store.create_order_checkpoint.return_value = 2
        mock_store.get_tracked_order_by_id.return_value = tracked_order

        result = await orchestrator.add_order_checkpoint(checkpoint)

        assert result == 2
        mock_store.create_order_checkpoint.assert_awaited_once_with(checkpoint)
        mock_store.update_tracked_order.assert_awaited_once_with(
            123, date(2025, 5, 1), OrderStatus.SHIPPED
        )
        mock_order_lookup.get_order_by_id.assert_awaited_once_with(456)
        mock_notification_sender.send_shipping_progress_notification.assert_awaited_once_with(
            789, 123, "SHIPPED", ANY
        )

    @pytest.mark.asyncio
    async def test_processing_checkpoint_does_not_notify(
        self, orchestrator, mock_store, mock_order_lookup, mock_notification_sender, tracked_order
    ):
        checkpoint = OrderCheckpointCreate(
            tracked_order_id=123,
            status=OrderStatus.PROCESSING,
            description="Order received"
        )
        mock_store.create_order_checkpoint.return_value = 1
        mock_store.get_tracked_order_by_id.return_value = tracked_order

        result = await orchestrator.add_order_checkpoint(checkpoint)

        assert result == 1
        mock_store.update_tracked_order.assert_awaited_once_with(
            123, date(2025, 5, 1), OrderStatus.PROCESSING
        )
        mock_order_lookup.get_order_by_id.assert_not_awaited()
        mock_notification_sender.send_shipping_progress_notification.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_notification_failure_still_returns_new_id(
        self, orchestrator, mock_store, mock_notification_sender, tracked_order
    ):
        checkpoint = OrderCheckpointCreate(
            tracked_order_id=123,
            status=OrderStatus.OUT_FOR_DELIVERY,
            description="With the driver"
        )
        mock_store.create_order_checkpoint.return_value = 3
        mock_store.get_tracked_order_by_id.return_value = tracked_order
        mock_notification_sender.send_shipping_progress_notification.side_effect = Exception("smtp down")

        assert await orchestrator.add_order_checkpoint(checkpoint) == 3
        mock_store.update_tracked_order.assert_awaited_once_with(
            123, date(2025, 5, 1), OrderStatus.OUT_FOR_DELIVERY
        )

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, orchestrator, mock_store):
        checkpoint = OrderCheckpointCreate(
            tracked_order_id=123,
            status=OrderStatus.SHIPPED,
            description="Handed over to the courier"
        )
        mock_store.create_order_checkpoint.side_effect = PersistenceError("insert failed")

        with pytest.raises(PersistenceError):
            await orchestrator.add_order_checkpoint(checkpoint)

        mock_store.update_tracked_order.assert_not_awaited()


class TestUpdateOrderCheckpoint:
    """Direct checkpoint update: status sync, errors propagate"""

    @pytest.mark.asyncio
    async def test_updates_checkpoint_and_tracked_order(self, orchestrator, mock_store, tracked_order):
        timestamp = datetime(2025, 4, 3, 9, 30)
        mock_store.get_order_checkpoint_by_id.return_value = OrderCheckpointRead(
            checkpoint_id=2,
            tracked_order_id=123,
            status=OrderStatus.IN_WAREHOUSE,
            timestamp=timestamp,
            location="Hub B",
            description="Sorted"
        )
        mock_store.get_tracked_order_by_id.return_value = tracked_order

        await orchestrator.update_order_checkpoint(
            2, timestamp, "Hub B", "Sorted", OrderStatus.IN_WAREHOUSE
        )

        mock_store.update_order_checkpoint.assert_awaited_once_with(
            2, timestamp, "Hub B", "Sorted", OrderStatus.IN_WAREHOUSE
        )
        mock_store.update_tracked_order.assert_awaited_once_with(
            123, date(2025, 5, 1), OrderStatus.IN_WAREHOUSE
        )

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, orchestrator, mock_store):
        mock_store.update_order_checkpoint.side_effect = CheckpointNotFoundError("missing")

        with pytest.raises(CheckpointNotFoundError):
            await orchestrator.update_order_checkpoint(
                99, datetime(2025, 4, 3), None, "Sorted", OrderStatus.IN_WAREHOUSE
            )

    @pytest.mark.asyncio
    async def test_sync_failure_propagates(self, orchestrator, mock_store, checkpoints):
        mock_store.get_order_checkpoint_by_id.return_value = checkpoints[1]
        mock_store.get_tracked_order_by_id.side_effect = TrackedOrderNotFoundError("missing")

        with pytest.raises(TrackedOrderNotFoundError):
            await orchestrator.update_order_checkpoint(
                2, datetime(2025, 4, 3), None, "Sorted", OrderStatus.IN_WAREHOUSE
            )


class TestUpdateTrackedOrder:
    """Direct tracked-order update"""

    @pytest.mark.asyncio
    async def test_milestone_status_sends_no_notification(
        self, orchestrator, mock_store, mock_order_lookup, mock_notification_sender
    ):
        # Documented quirk: only the ownership-checked update notifies
        await orchestrator.update_tracked_order(123, date(2025, 5, 1), OrderStatus.SHIPPED)

        mock_store.update_tracked_order.assert_awaited_once_with(123, date(2025, 5, 1), OrderStatus.SHIPPED)
        mock_order_lookup.get_order_by_id.assert_not_awaited()
        mock_notification_sender.send_shipping_progress_notification.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_notification_flag_enables_milestone_notifications(
        self, mock_store, mock_order_lookup, mock_notification_sender, tracked_order
    ):
        orchestrator = TrackedOrderOrchestrator(
            store=mock_store,
            order_lookup=mock_order_lookup,
            notification_sender=mock_notification_sender,
            notify_on_direct_status_update=True
        )
        mock_store.get_tracked_order_by_id.return_value = tracked_order

        await orchestrator.update_tracked_order(123, date(2025, 5, 1), OrderStatus.SHIPPED)

        mock_notification_sender.send_shipping_progress_notification.assert_awaited_once_with(
            789, 123, "SHIPPED", ANY
        )

    @pytest.mark.asyncio
    async def test_notification_flag_ignores_non_milestones(
        self, mock_store, mock_order_lookup, mock_notification_sender
    ):
        orchestrator = TrackedOrderOrchestrator(
            store=mock_store,
            order_lookup=mock_order_lookup,
            notification_sender=mock_notification_sender,
            notify_on_direct_status_update=True
        )

        await orchestrator.update_tracked_order(123, date(2025, 5, 1), OrderStatus.IN_WAREHOUSE)

        mock_notification_sender.send_shipping_progress_notification.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, orchestrator, mock_store):
        mock_store.update_tracked_order.side_effect = PersistenceError("update failed")

        with pytest.raises(PersistenceError):
            await orchestrator.update_tracked_order(123, date(2025, 5, 1), OrderStatus.SHIPPED)


class TestUpdateOwnedOrderCheckpoint:
    """Ownership-checked checkpoint update: bool result, nothing raises"""

    @pytest.mark.asyncio
    async def test_owner_mismatch_returns_false_without_update(self, orchestrator, mock_store):
        mock_store.get_order_checkpoint_by_id.return_value = OrderCheckpointRead(
            checkpoint_id=123,
            tracked_order_id=789,
            status=OrderStatus.PROCESSING,
            timestamp=datetime(2025, 4, 1),
            description="Order received"
        )

        result = await orchestrator.update_owned_order_checkpoint(
            123, datetime(2025, 4, 3), "Hub B", "Sorted", OrderStatus.IN_WAREHOUSE,
            expected_tracked_order_id=456
        )

        assert result is False
        mock_store.update_order_checkpoint.assert_not_awaited()
        mock_store.update_tracked_order.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_updates_current_checkpoint_and_syncs_status(
        self, orchestrator, mock_store, tracked_order, checkpoints
    ):
        timestamp = datetime(2025, 4, 3)
        mock_store.get_order_checkpoint_by_id.return_value = checkpoints[1]
        mock_store.list_order_checkpoints.return_value = checkpoints
        mock_store.get_tracked_order_by_id.return_value = tracked_order

        result = await orchestrator.update_owned_order_checkpoint(
            2, timestamp, "Hub B", "Sorted", OrderStatus.IN_WAREHOUSE,
            expected_tracked_order_id=123
        )

        assert result is True
        mock_store.update_order_checkpoint.assert_awaited_once_with(
            2, timestamp, "Hub B", "Sorted", OrderStatus.IN_WAREHOUSE
        )
        mock_store.update_tracked_order.assert_awaited_once_with(
            123, date(2025, 5, 1), OrderStatus.IN_WAREHOUSE
        )

    @pytest.mark.asyncio
    async def test_older_checkpoint_leaves_current_status_alone(
        self, orchestrator, mock_store, checkpoints
    ):
        mock_store.get_order_checkpoint_by_id.return_value = checkpoints[0]
        mock_store.list_order_checkpoints.return_value = checkpoints

        result = await orchestrator.update_owned_order_checkpoint(
            1, datetime(2025, 4, 1), "Warehouse A", "Order received (corrected)",
            OrderStatus.PROCESSING, expected_tracked_order_id=123
        )

        assert result is True
        mock_store.update_order_checkpoint.assert_awaited_once()
        mock_store.update_tracked_order.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_load_failure_returns_false(self, orchestrator, mock_store):
        mock_store.get_order_checkpoint_by_id.side_effect = CheckpointNotFoundError("missing")

        result = await orchestrator.update_owned_order_checkpoint(
            5, datetime(2025, 4, 3), None, "Sorted", OrderStatus.IN_WAREHOUSE,
            expected_tracked_order_id=123
        )

        assert result is False
        mock_store.update_order_checkpoint.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_failure_returns_false(self, orchestrator, mock_store, checkpoints):
        mock_store.get_order_checkpoint_by_id.return_value = checkpoints[1]
        mock_store.update_order_checkpoint.side_effect = PersistenceError("update failed")

        result = await orchestrator.update_owned_order_checkpoint(
            2, datetime(2025, 4, 3), None, "Sorted", OrderStatus.IN_WAREHOUSE,
            expected_tracked_order_id=123
        )

        assert result is False


class TestUpdateOwnedTrackedOrder:
    """Ownership-checked tracked-order update: bool result, always notifies"""

    @pytest.mark.asyncio
    async def test_updates_and_notifies(
        self, orchestrator, mock_store, mock_order_lookup, mock_notification_sender, tracked_order
    ):
        mock_store.get_tracked_order_by_id.return_value = tracked_order

        result = await orchestrator.update_owned_tracked_order(
            123, date(2025, 5, 3), "9 New Rd", OrderStatus.IN_TRANSIT, expected_order_id=456
        )

        assert result is True
        mock_store.update_tracked_order.assert_awaited_once_with(
            123, date(2025, 5, 3), OrderStatus.IN_TRANSIT, delivery_address="9 New Rd"
        )
        mock_order_lookup.get_order_by_id.assert_awaited_once_with(456)
        mock_notification_sender.send_shipping_progress_notification.assert_awaited_once_with(
            789, 123, "IN_TRANSIT", ANY
        )

    @pytest.mark.asyncio
    async def test_order_mismatch_returns_false(
        self, orchestrator, mock_store, mock_notification_sender, tracked_order
    ):
        mock_store.get_tracked_order_by_id.return_value = tracked_order

        result = await orchestrator.update_owned_tracked_order(
            123, date(2025, 5, 3), "9 New Rd", OrderStatus.SHIPPED, expected_order_id=999
        )

        assert result is False
        mock_store.update_tracked_order.assert_not_awaited()
        mock_notification_sender.send_shipping_progress_notification.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_failure_returns_false_without_lookup(
        self, orchestrator, mock_store, mock_order_lookup, tracked_order
    ):
        mock_store.get_tracked_order_by_id.return_value = tracked_order
        mock_store.update_tracked_order.side_effect = PersistenceError("update failed")

        result = await orchestrator.update_owned_tracked_order(
            123, date(2025, 5, 3), "9 New Rd", OrderStatus.SHIPPED, expected_order_id=456
        )

        assert result is False
        mock_order_lookup.get_order_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_notification_failure_still_returns_true(
        self, orchestrator, mock_store, mock_notification_sender, tracked_order
    ):
        mock_store.get_tracked_order_by_id.return_value = tracked_order
        mock_notification_sender.send_shipping_progress_notification.side_effect = NotificationError("down")

        result = await orchestrator.update_owned_tracked_order(
            123, date(2025, 5, 3), "9 New Rd", OrderStatus.SHIPPED, expected_order_id=456
        )

        assert result is True
        mock_store.update_tracked_order.assert_awaited_once()
