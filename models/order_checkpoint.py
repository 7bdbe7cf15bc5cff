from sqlalchemy import Column, Integer, String, Enum, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from models.base import Base, OrderStatus


class OrderCheckpoint(Base):
    """
    Historical tracking event of a shipment.
    
    Purpose:
    - Ordered history of a tracked order (oldest first by checkpoint_id)
    - The most recent row is the "current checkpoint"
    
    Design:
    - tracked_order_id never changes after insert
    - Rows are removed only by reversion or explicit delete
    """
    __tablename__ = "order_checkpoints"
    
    checkpoint_id = Column(Integer, primary_key=True, autoincrement=True)
    tracked_order_id = Column(
        Integer,
        ForeignKey("tracked_orders.tracked_order_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    
    status = Column(Enum(OrderStatus, name="order_status"), nullable=False)
    timestamp = Column(DateTime, nullable=False)
    location = Column(String(255), nullable=True)
    description = Column(Text, nullable=False)
    
    # Relationships
    tracked_order = relationship("TrackedOrder", back_populates="checkpoints")
    
    __table_args__ = (
        Index("idx_checkpoint_tracked_order", "tracked_order_id", "checkpoint_id"),
    )
