from sqlalchemy import Column, Integer, String, Enum, Date, DateTime, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from models.base import Base, OrderStatus


class TrackedOrder(Base):
    """
    Shipment-tracking record for a purchased order.
    
    Design:
    - One row per tracked shipment; order_id is written once at creation
    - current_status is denormalized from the checkpoint history and kept in
      sync by the orchestrator, not by the database
    - estimated_delivery_date is a plain calendar date
    """
    __tablename__ = "tracked_orders"
    
    tracked_order_id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, nullable=False, index=True)
    
    current_status = Column(Enum(OrderStatus, name="order_status"), nullable=False, default=OrderStatus.PROCESSING)
    estimated_delivery_date = Column(Date, nullable=False)
    delivery_address = Column(String(500), nullable=False)
    
    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    checkpoints = relationship(
        "OrderCheckpoint",
        back_populates="tracked_order",
        passive_deletes=True,
        order_by="OrderCheckpoint.checkpoint_id"
    )
    
    __table_args__ = (
        Index("idx_tracked_order_status", "current_status"),
    )
