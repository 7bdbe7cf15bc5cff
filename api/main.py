"""
FastAPI application initialization
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from api.routes import health, tracked_orders, checkpoints
from api.middleware import RequestContextMiddleware
from core.config import settings
from core.logging import setup_logging
from core.exceptions import (
    TrackingException,
    ReversionError,
    TrackedOrderNotFoundError,
    CheckpointNotFoundError,
)
from tracking.scheduler import ReconciliationScheduler
import logging

setup_logging()

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Order Tracking API",
    description="Shipment checkpoints, status reversion and buyer notifications",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

scheduler = ReconciliationScheduler() if settings.RECONCILE_ENABLED else None


app.include_router(health.router)
app.include_router(tracked_orders.router)
app.include_router(checkpoints.router)


# ============================================================================
# Exception handlers
# ============================================================================

@app.exception_handler(ReversionError)
async def reversion_error_handler(request: Request, exc: ReversionError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=exc.to_dict())


@app.exception_handler(TrackingException)
async def tracking_exception_handler(request: Request, exc: TrackingException):
    if isinstance(exc, (TrackedOrderNotFoundError, CheckpointNotFoundError)):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=exc.to_dict())
    
    logger.error(f"Request {request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=exc.to_dict())


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error_type": type(exc).__name__, "message": str(exc)}
    )


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting Order Tracking API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")
    
    if scheduler is not None:
        scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down Order Tracking API")
    if scheduler is not None:
        scheduler.stop()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Order Tracking API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "tracked_orders": "/tracked-orders",
            "checkpoints": "/checkpoints"
        }
    }
