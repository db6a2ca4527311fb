"""
Vision lifecycle endpoints.

Creation, opening the voting window, finalization and read-only projections
(vision record, progress roll-up, voting results).
"""

from fastapi import APIRouter, HTTPException, status

from api.deps import CurrentPrincipal, Engine
from schemas.governance import FinalizeOutcome, Vision, VisionProgress, VotingResults
from schemas.vision import VisionCreate, VisionCreated

router = APIRouter()


def _vision_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vision not found")


@router.post("", response_model=VisionCreated, status_code=status.HTTP_201_CREATED)
async def create_vision(
    data: VisionCreate,
    principal: CurrentPrincipal,
    engine: Engine,
) -> VisionCreated:
    """
    Propose a new vision.

    The caller must be a registered stakeholder. The vision starts in draft
    and earns the creator activity reputation.
    """
    vision = await engine.create_vision(
        principal,
        data.title,
        data.description,
        data.category,
        data.priority,
        data.estimated_offset,
    )
    return VisionCreated(vision_id=vision.id)


@router.get("/{vision_id}", response_model=Vision)
async def get_vision(vision_id: int, engine: Engine) -> Vision:
    vision = await engine.get_vision(vision_id)
    if vision is None:
        raise _vision_not_found()
    return vision


@router.post("/{vision_id}/start-voting", response_model=Vision)
async def start_voting(vision_id: int, principal: CurrentPrincipal, engine: Engine) -> Vision:
    """Open voting on a draft vision (creator or governance owner only)."""
    return await engine.start_voting(principal, vision_id)


@router.post("/{vision_id}/finalize", response_model=FinalizeOutcome)
async def finalize_voting(vision_id: int, principal: CurrentPrincipal, engine: Engine) -> FinalizeOutcome:
    """
    Close voting once the window has ended and apply quorum/approval rules.

    A rejection is a successful finalization; its reason is in the response.
    """
    return await engine.finalize_voting(principal, vision_id)


@router.get("/{vision_id}/progress", response_model=VisionProgress)
async def get_vision_progress(vision_id: int, engine: Engine) -> VisionProgress:
    progress = await engine.get_vision_progress(vision_id)
    if progress is None:
        raise _vision_not_found()
    return progress


@router.get("/{vision_id}/results", response_model=VotingResults)
async def get_voting_results(vision_id: int, engine: Engine) -> VotingResults:
    results = await engine.get_voting_results(vision_id)
    if results is None:
        raise _vision_not_found()
    return results
