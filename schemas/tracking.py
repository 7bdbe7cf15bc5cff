"""
Pydantic schemas for tracked orders, checkpoints and notifications
"""

from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import date, datetime
from models.base import OrderStatus


class TrackedOrderCreate(BaseModel):
    """
    Schema for creating tracked orders.
    
    The tracked order starts without checkpoints; current_status is the
    status the buyer is first notified about.
    """
    
    order_id: int = Field(..., gt=0)
    current_status: OrderStatus = OrderStatus.PROCESSING
    estimated_delivery_date: date
    delivery_address: str = Field(..., min_length=1, max_length=500)
    
    @validator("delivery_address")
    def clean_delivery_address(cls, v):
        """Strip surrounding whitespace from the address"""
        v = v.strip()
        if not v:
            raise ValueError("Delivery address cannot be empty after stripping")
        return v


class TrackedOrderRead(TrackedOrderCreate):
    """Tracked order as loaded from the store"""
    tracked_order_id: int
    
    class Config:
        from_attributes = True


class OrderCheckpointCreate(BaseModel):
    """Schema for appending a checkpoint to a tracked order"""
    
    tracked_order_id: int = Field(..., gt=0)
    status: OrderStatus
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    location: Optional[str] = Field(None, max_length=255)
    description: str = Field(..., min_length=1)
    
    @validator("location", pre=True)
    def blank_location_is_none(cls, v):
        """Treat empty locations as missing"""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class OrderCheckpointRead(OrderCheckpointCreate):
    """Checkpoint as loaded from the store"""
    checkpoint_id: int
    
    class Config:
        from_attributes = True


class OrderInfo(BaseModel):
    """Subset of an order returned by the order service"""
    order_id: int
    buyer_id: int


class ShippingProgressNotification(BaseModel):
    """Shipping-progress message delivered to a buyer"""
    
    recipient_id: int
    tracked_order_id: int
    shipping_state: str
    delivery_date: datetime
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    category: str = "ORDER_SHIPPING_PROGRESS"
    
    @property
    def title(self) -> str:
        return "Order Shipping Update"
    
    @property
    def subtitle(self) -> str:
        return f"New info on order: {self.tracked_order_id} is available."
    
    @property
    def content(self) -> str:
        return (
            f"Your order: {self.tracked_order_id} has reached the {self.shipping_state} stage. "
            f"Estimated delivery is on {self.delivery_date:%Y-%m-%d}."
        )
