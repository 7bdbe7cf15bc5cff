"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and the OrderStatus enum
    tracked_order: Shipment-tracking record with the denormalized current status
    order_checkpoint: Ordered checkpoint history of a tracked order

Usage:
    from models.base import Base, OrderStatus
    from models.tracked_order import TrackedOrder
    from models.order_checkpoint import OrderCheckpoint

Example:
    tracked = TrackedOrder(
        order_id=456,
        current_status=OrderStatus.PROCESSING,
        estimated_delivery_date=date(2025, 5, 1),
        delivery_address="123 Test St"
    )
    session.add(tracked)
    await session.commit()

Relationships:
    - TrackedOrder → OrderCheckpoint (one-to-many, cascade on delete)
"""

__all__ = [
    "Base",
    "OrderStatus",
    "TrackedOrder",
    "OrderCheckpoint",
]
