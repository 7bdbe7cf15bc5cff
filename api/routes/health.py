"""
Health check endpoint with database status
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, text
from api.dependencies import get_db
from schemas.api import HealthCheckResponse
from models.tracked_order import TrackedOrder
from datetime import datetime
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.
    
    Returns:
    - Database connectivity status
    - Number of tracked orders
    """
    db_connected = False
    tracked_orders = 0
    
    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")
    
    if db_connected:
        try:
            result = await db.execute(select(func.count()).select_from(TrackedOrder))
            tracked_orders = result.scalar() or 0
        except Exception as e:
            logger.error(f"Failed to count tracked orders: {str(e)}")
    
    return HealthCheckResponse(
        status="healthy",  # validator downgrades when the database is down
        timestamp=datetime.utcnow(),
        database_connected=db_connected,
        tracked_orders=tracked_orders
    )
