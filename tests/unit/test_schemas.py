"""
Unit tests for request and notification schemas
"""

import pytest
from datetime import date, datetime
from pydantic import ValidationError
from models.base import OrderStatus
from schemas.tracking import TrackedOrderCreate, OrderCheckpointCreate, ShippingProgressNotification
from schemas.api import HealthCheckResponse


def test_tracked_order_defaults_to_processing():
    order = TrackedOrderCreate(
        order_id=456,
        estimated_delivery_date=date(2025, 5, 1),
        delivery_address=" 123 Test St "
    )

    assert order.current_status == OrderStatus.PROCESSING
    assert order.delivery_address == "123 Test St"


def test_blank_delivery_address_is_rejected():
    with pytest.raises(ValidationError):
        TrackedOrderCreate(order_id=456, estimated_delivery_date=date(2025, 5, 1), delivery_address="   ")


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError):
        OrderCheckpointCreate(tracked_order_id=1, status="LOST", description="Gone")


def test_blank_location_becomes_none():
    checkpoint = OrderCheckpointCreate(
        tracked_order_id=1,
        status=OrderStatus.IN_TRANSIT,
        location="  ",
        description="Left the hub"
    )

    assert checkpoint.location is None


def test_notification_text():
    notification = ShippingProgressNotification(
        recipient_id=789,
        tracked_order_id=123,
        shipping_state="OUT_FOR_DELIVERY",
        delivery_date=datetime(2025, 5, 1, 15, 30)
    )

    assert notification.category == "ORDER_SHIPPING_PROGRESS"
    assert notification.subtitle == "New info on order: 123 is available."
    assert notification.content == (
        "Your order: 123 has reached the OUT_FOR_DELIVERY stage. "
        "Estimated delivery is on 2025-05-01."
    )


def test_health_is_unhealthy_without_database():
    assert HealthCheckResponse(database_connected=False).status == "unhealthy"
    assert HealthCheckResponse(database_connected=True).status == "healthy"
