"""
Tracked order endpoints: creation, updates, checkpoint history and reversion
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from typing import List
from api.dependencies import get_orchestrator
from schemas.api import (
    TrackedOrderUpdate,
    OwnedTrackedOrderUpdate,
    TrackedOrderDetail,
    CheckpointCreateRequest,
    CreatedResponse,
    MutationResult,
)
from schemas.tracking import (
    TrackedOrderCreate,
    TrackedOrderRead,
    OrderCheckpointCreate,
    OrderCheckpointRead,
)
from tracking.orchestrator import TrackedOrderOrchestrator
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tracked-orders", tags=["Tracked Orders"])


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")


async def _load_or_404(orchestrator: TrackedOrderOrchestrator, tracked_order_id: int) -> TrackedOrderRead:
    tracked_order = await orchestrator.get_tracked_order_by_id(tracked_order_id)
    if tracked_order is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tracked order {tracked_order_id} not found"
        )
    return tracked_order


@router.get("", response_model=List[TrackedOrderRead])
async def list_tracked_orders(
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    """All tracked orders"""
    return await orchestrator.get_all_tracked_orders()


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_tracked_order(
    request: Request,
    body: TrackedOrderCreate,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    """Create a tracked order; the buyer is notified best-effort"""
    tracked_order_id = await orchestrator.add_tracked_order(body)
    logger.info(f"[{_request_id(request)}] Created tracked order {tracked_order_id}")
    return CreatedResponse(id=tracked_order_id)


@router.get("/{tracked_order_id}", response_model=TrackedOrderDetail)
async def get_tracked_order(
    tracked_order_id: int,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    """Tracked order with its checkpoint history (oldest first)"""
    tracked_order = await _load_or_404(orchestrator, tracked_order_id)
    checkpoints = await orchestrator.get_all_order_checkpoints(tracked_order_id)
    return TrackedOrderDetail(
        tracked_order=tracked_order,
        checkpoints=checkpoints,
        number_of_checkpoints=len(checkpoints)
    )


@router.put("/{tracked_order_id}", response_model=MutationResult)
async def update_tracked_order(
    tracked_order_id: int,
    body: TrackedOrderUpdate,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    """Set delivery date and status directly"""
    await orchestrator.update_tracked_order(
        tracked_order_id,
        body.estimated_delivery_date,
        body.current_status
    )
    return MutationResult(success=True)


@router.patch("/{tracked_order_id}", response_model=MutationResult)
async def update_owned_tracked_order(
    request: Request,
    tracked_order_id: int,
    body: OwnedTrackedOrderUpdate,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    """Update a tracked order on behalf of the order it tracks"""
    updated = await orchestrator.update_owned_tracked_order(
        tracked_order_id,
        body.estimated_delivery_date,
        body.delivery_address,
        body.current_status,
        body.order_id
    )
    if not updated:
        logger.warning(f"[{_request_id(request)}] Tracked order {tracked_order_id} not updated")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Tracked order {tracked_order_id} could not be updated for order {body.order_id}"
        )
    return MutationResult(success=True)


@router.delete("/{tracked_order_id}", response_model=MutationResult)
async def delete_tracked_order(
    tracked_order_id: int,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    if not await orchestrator.delete_tracked_order(tracked_order_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tracked order {tracked_order_id} not found"
        )
    return MutationResult(success=True)


# ============================================================================
# Checkpoint history
# ============================================================================

@router.get("/{tracked_order_id}/checkpoints", response_model=List[OrderCheckpointRead])
async def list_checkpoints(
    tracked_order_id: int,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    return await orchestrator.get_all_order_checkpoints(tracked_order_id)


@router.post(
    "/{tracked_order_id}/checkpoints",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED
)
async def add_checkpoint(
    request: Request,
    tracked_order_id: int,
    body: CheckpointCreateRequest,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    """Append a checkpoint; it becomes the tracked order's current status"""
    await _load_or_404(orchestrator, tracked_order_id)
    checkpoint_id = await orchestrator.add_order_checkpoint(
        OrderCheckpointCreate(tracked_order_id=tracked_order_id, **body.model_dump())
    )
    logger.info(
        f"[{_request_id(request)}] Added checkpoint {checkpoint_id} "
        f"({body.status.value}) to tracked order {tracked_order_id}"
    )
    return CreatedResponse(id=checkpoint_id)


@router.get("/{tracked_order_id}/checkpoints/last", response_model=OrderCheckpointRead)
async def get_last_checkpoint(
    tracked_order_id: int,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    tracked_order = await _load_or_404(orchestrator, tracked_order_id)
    checkpoint = await orchestrator.get_last_checkpoint(tracked_order)
    if checkpoint is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tracked order {tracked_order_id} has no checkpoints"
        )
    return checkpoint


# ============================================================================
# Reversion
# ============================================================================

@router.post("/{tracked_order_id}/revert", response_model=TrackedOrderRead)
async def revert_to_previous_checkpoint(
    request: Request,
    tracked_order_id: int,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    """
    Remove the current checkpoint and fall back to the previous one.
    
    Failures surface through the ReversionError handler (409).
    """
    tracked_order = await _load_or_404(orchestrator, tracked_order_id)
    await orchestrator.revert_to_previous_checkpoint(tracked_order)
    logger.info(f"[{_request_id(request)}] Reverted tracked order {tracked_order_id}")
    return await _load_or_404(orchestrator, tracked_order_id)


@router.post("/{tracked_order_id}/reapply-last", response_model=MutationResult)
async def revert_to_last_checkpoint(
    tracked_order_id: int,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    """Re-apply the last checkpoint's status without deleting anything"""
    tracked_order = await _load_or_404(orchestrator, tracked_order_id)
    if not await orchestrator.revert_to_last_checkpoint(tracked_order):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Tracked order {tracked_order_id} has no checkpoint to re-apply"
        )
    return MutationResult(success=True)
