"""
Milestone endpoints for approved visions.
"""

from fastapi import APIRouter, HTTPException, status

from api.deps import CurrentPrincipal, Engine
from schemas.governance import Milestone
from schemas.milestone import MilestoneCreate, MilestoneStatusUpdate

router = APIRouter()


@router.post(
    "/{vision_id}/milestones",
    response_model=Milestone,
    status_code=status.HTTP_201_CREATED,
)
async def add_milestone(
    vision_id: int,
    data: MilestoneCreate,
    principal: CurrentPrincipal,
    engine: Engine,
) -> Milestone:
    """Attach a milestone to an approved vision (creator or governance owner only)."""
    return await engine.add_milestone(
        principal,
        vision_id,
        data.milestone_id,
        data.title,
        data.description,
        data.target_date,
        responsible_party=data.responsible_party,
    )


@router.get("/{vision_id}/milestones/{milestone_id}", response_model=Milestone)
async def get_milestone(vision_id: int, milestone_id: int, engine: Engine) -> Milestone:
    milestone = await engine.get_milestone(vision_id, milestone_id)
    if milestone is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Milestone not found")
    return milestone


@router.patch("/{vision_id}/milestones/{milestone_id}", response_model=Milestone)
async def update_milestone_status(
    vision_id: int,
    milestone_id: int,
    data: MilestoneStatusUpdate,
    principal: CurrentPrincipal,
    engine: Engine,
) -> Milestone:
    """
    Change a milestone's status.

    Allowed for the vision creator, the governance owner and the milestone's
    responsible party. Completing the last milestone completes the vision.
    """
    return await engine.update_milestone_status(
        principal,
        vision_id,
        milestone_id,
        data.status,
        evidence=data.evidence,
    )
