"""
Checkpoint endpoints addressed by checkpoint id
"""

from fastapi import APIRouter, Depends, HTTPException, status
from api.dependencies import get_orchestrator
from schemas.api import CheckpointUpdate, OwnedCheckpointUpdate, MutationResult
from schemas.tracking import OrderCheckpointRead
from tracking.orchestrator import TrackedOrderOrchestrator
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/checkpoints", tags=["Checkpoints"])


@router.get("/{checkpoint_id}", response_model=OrderCheckpointRead)
async def get_checkpoint(
    checkpoint_id: int,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    checkpoint = await orchestrator.get_order_checkpoint_by_id(checkpoint_id)
    if checkpoint is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Checkpoint {checkpoint_id} not found"
        )
    return checkpoint


@router.put("/{checkpoint_id}", response_model=MutationResult)
async def update_checkpoint(
    checkpoint_id: int,
    body: CheckpointUpdate,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    """Amend a checkpoint; the owning tracked order takes its status"""
    await orchestrator.update_order_checkpoint(
        checkpoint_id,
        body.timestamp,
        body.location,
        body.description,
        body.status
    )
    return MutationResult(success=True)


@router.patch("/{checkpoint_id}", response_model=MutationResult)
async def update_owned_checkpoint(
    checkpoint_id: int,
    body: OwnedCheckpointUpdate,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    """Amend a checkpoint only if it belongs to the given tracked order"""
    updated = await orchestrator.update_owned_order_checkpoint(
        checkpoint_id,
        body.timestamp,
        body.location,
        body.description,
        body.status,
        body.tracked_order_id
    )
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Checkpoint {checkpoint_id} could not be updated for tracked order {body.tracked_order_id}"
        )
    return MutationResult(success=True)


@router.delete("/{checkpoint_id}", response_model=MutationResult)
async def delete_checkpoint(
    checkpoint_id: int,
    orchestrator: TrackedOrderOrchestrator = Depends(get_orchestrator)
):
    if not await orchestrator.delete_order_checkpoint(checkpoint_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Checkpoint {checkpoint_id} not found"
        )
    return MutationResult(success=True)
