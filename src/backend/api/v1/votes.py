"""
Vote endpoints.

Ballots are weighted by the voter's reputation, participation and role at the
moment of casting. One ballot per stakeholder per vision.
"""

from fastapi import APIRouter, HTTPException, status

from api.deps import CurrentPrincipal, Engine
from schemas.governance import Ballot
from schemas.vote import VoteCreate, VoteEligibility

router = APIRouter()


@router.post("", response_model=Ballot, status_code=status.HTTP_201_CREATED)
async def cast_vote(data: VoteCreate, principal: CurrentPrincipal, engine: Engine) -> Ballot:
    """
    Cast a ballot on a vision that is open for voting.

    Requirements:
    - Caller must be a registered stakeholder
    - Vision must be in voting and within its window
    - Caller cannot vote twice on the same vision
    """
    return await engine.cast_vote(principal, data.vision_id, data.direction)


@router.get("/eligibility/{vision_id}", response_model=VoteEligibility)
async def check_eligibility(vision_id: int, principal: CurrentPrincipal, engine: Engine) -> VoteEligibility:
    """Check whether the caller could vote on a vision right now."""
    return VoteEligibility(
        vision_id=vision_id,
        identity=principal,
        can_vote=await engine.can_vote(vision_id, principal),
    )


@router.get("/{vision_id}/{voter}", response_model=Ballot)
async def get_vote(vision_id: int, voter: str, engine: Engine) -> Ballot:
    ballot = await engine.get_vote(vision_id, voter)
    if ballot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vote not found")
    return ballot
