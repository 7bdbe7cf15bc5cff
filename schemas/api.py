"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any
from datetime import date, datetime
from models.base import OrderStatus
from schemas.tracking import TrackedOrderRead, OrderCheckpointRead

# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool
    tracked_orders: int = 0
    # Declared last so the validator sees database_connected
    status: str = Field("healthy", description="Overall system status: healthy, unhealthy")

    @validator("status", pre=True, always=True)
    def determine_status(cls, v, values):
        """Unhealthy whenever the database is unreachable"""
        if not values.get("database_connected", False):
            return "unhealthy"
        return v or "healthy"

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2025-04-02T10:30:00Z",
                "database_connected": True,
                "tracked_orders": 42
            }
        }

# ============================================================================
# Tracked Order Schemas
# ============================================================================

class TrackedOrderUpdate(BaseModel):
    """Direct update of delivery date and status"""
    estimated_delivery_date: date
    current_status: OrderStatus


class OwnedTrackedOrderUpdate(TrackedOrderUpdate):
    """Update that only applies if the tracked order tracks ``order_id``"""
    delivery_address: str = Field(..., min_length=1, max_length=500)
    order_id: int = Field(..., gt=0)


class TrackedOrderDetail(BaseModel):
    """Tracked order with its checkpoint history"""
    tracked_order: TrackedOrderRead
    checkpoints: List[OrderCheckpointRead] = Field(default_factory=list)
    number_of_checkpoints: int = 0

# ============================================================================
# Checkpoint Schemas
# ============================================================================

class CheckpointCreateRequest(BaseModel):
    """New checkpoint appended under /tracked-orders/{id}/checkpoints"""
    status: OrderStatus
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    location: Optional[str] = Field(None, max_length=255)
    description: str = Field(..., min_length=1)


class CheckpointUpdate(BaseModel):
    """Direct amendment of a checkpoint"""
    timestamp: datetime
    location: Optional[str] = Field(None, max_length=255)
    description: str = Field(..., min_length=1)
    status: OrderStatus


class OwnedCheckpointUpdate(CheckpointUpdate):
    """Amendment that only applies if the checkpoint belongs to ``tracked_order_id``"""
    tracked_order_id: int = Field(..., gt=0)

# ============================================================================
# Generic Responses
# ============================================================================

class CreatedResponse(BaseModel):
    id: int


class MutationResult(BaseModel):
    success: bool
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    error_type: str
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)
    timestamp: Optional[datetime] = None
    original_error: Optional[str] = None
