"""
Order-tracking components.

Modules:
    store: SQLAlchemy-backed persistence of tracked orders and checkpoints
    service_client: Retrying HTTP client shared by the service collaborators
    order_lookup: Buyer resolution through the order service
    notifications: Shipping-progress notifications through the notification service
    orchestrator: Checkpoint mutation, status sync, reversion and notification rules
    scheduler: APScheduler job that repairs drifted current statuses

Usage:
    from tracking.store import CheckpointStore
    from tracking.orchestrator import TrackedOrderOrchestrator

Example:
    orchestrator = TrackedOrderOrchestrator(
        store=CheckpointStore(async_session_maker),
        order_lookup=HTTPOrderLookup(),
        notification_sender=HTTPNotificationSender()
    )
    
    checkpoint_id = await orchestrator.add_order_checkpoint(
        OrderCheckpointCreate(
            tracked_order_id=123,
            status=OrderStatus.SHIPPED,
            description="Left the warehouse"
        )
    )

Error Handling:
    Each orchestrator entry point has its own failure contract (propagate,
    bool result or None result); see tracking.orchestrator. Exceptions are
    defined in core.exceptions.
"""

__all__ = [
    "CheckpointStore",
    "HTTPOrderLookup",
    "HTTPNotificationSender",
    "TrackedOrderOrchestrator",
    "ReconciliationScheduler",
    "SHIPPING_MILESTONES",
    "is_shipping_milestone",
]
