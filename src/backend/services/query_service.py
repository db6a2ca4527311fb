"""
Read-only projections over governance state.

Nothing here mutates storage; every method works against a read-only unit of
work and sees the latest committed state.
"""

from typing import Optional

from core.config import Settings, settings
from repositories.provider import (
    COMMENT_SEQUENCE,
    STAKEHOLDER_COUNTER,
    VISION_SEQUENCE,
    UnitOfWork,
)
from schemas.governance import (
    Ballot,
    Comment,
    Milestone,
    Stakeholder,
    SystemStats,
    Vision,
    VisionProgress,
    VotingResults,
)
from services.voting_engine import approval_rate, participation_rate, voting_open


class QueryService:
    """Service for governance read models."""

    def __init__(self, uow: UnitOfWork, config: Settings = settings):
        self.uow = uow
        self.config = config

    async def get_vision(self, vision_id: int) -> Optional[Vision]:
        return await self.uow.visions.get(vision_id)

    async def get_stakeholder(self, identity: str) -> Optional[Stakeholder]:
        return await self.uow.stakeholders.get(identity)

    async def get_vote(self, vision_id: int, voter: str) -> Optional[Ballot]:
        return await self.uow.ballots.get(vision_id, voter)

    async def get_milestone(self, vision_id: int, milestone_id: int) -> Optional[Milestone]:
        return await self.uow.milestones.get(vision_id, milestone_id)

    async def get_vision_progress(self, vision_id: int) -> Optional[VisionProgress]:
        return await self.uow.progress.get(vision_id)

    async def get_comment(self, vision_id: int, comment_id: int) -> Optional[Comment]:
        return await self.uow.comments.get(vision_id, comment_id)

    async def get_voting_results(self, vision_id: int) -> Optional[VotingResults]:
        """Tallies, voting deadline and the rates finalization would use right now."""
        vision = await self.uow.visions.get(vision_id)
        if vision is None:
            return None
        total_stakeholders = await self.uow.sequences.current(STAKEHOLDER_COUNTER)
        return VotingResults(
            vision_id=vision.id,
            status=vision.status,
            votes_for=vision.votes_for,
            votes_against=vision.votes_against,
            total_participants=vision.total_participants,
            voting_end=vision.voting_end,
            participation_rate=participation_rate(vision.total_participants, total_stakeholders),
            approval_rate=approval_rate(vision.votes_for, vision.votes_against),
        )

    async def can_vote(self, vision_id: int, identity: str, now: int) -> bool:
        """True iff the identity could cast a ballot on the vision at tick ``now``."""
        vision = await self.uow.visions.get(vision_id)
        if vision is None:
            return False
        if not await self.uow.stakeholders.exists(identity):
            return False
        if await self.uow.ballots.exists(vision_id, identity):
            return False
        return voting_open(vision, now)

    async def get_system_stats(self) -> SystemStats:
        return SystemStats(
            total_visions=await self.uow.sequences.current(VISION_SEQUENCE),
            total_stakeholders=await self.uow.sequences.current(STAKEHOLDER_COUNTER),
            total_comments=await self.uow.sequences.current(COMMENT_SEQUENCE),
            governance_enabled=self.config.GOVERNANCE_ENABLED,
        )
