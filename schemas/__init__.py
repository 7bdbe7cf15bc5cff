"""
Pydantic schemas for data validation and serialization.

Schemas:
    tracking: Tracked orders, checkpoints, order lookups and notifications
    api: API endpoint request/response schemas

Usage:
    from schemas.tracking import TrackedOrderCreate, OrderCheckpointCreate
    from schemas.api import OwnedCheckpointUpdate, MutationResult

Example:
    checkpoint = OrderCheckpointCreate(
        tracked_order_id=123,
        status=OrderStatus.SHIPPED,
        location="Cluj-Napoca",
        description="Handed over to the courier"
    )
    
    assert checkpoint.status == OrderStatus.SHIPPED

Validation:
    Blank delivery addresses are rejected, blank checkpoint locations are
    stored as missing and identifiers must be positive.
"""

__all__ = [
    "TrackedOrderCreate",
    "TrackedOrderRead",
    "OrderCheckpointCreate",
    "OrderCheckpointRead",
    "OrderInfo",
    "ShippingProgressNotification",
    "HealthCheckResponse",
    "MutationResult",
]
