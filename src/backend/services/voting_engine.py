"""
Weighted voting engine.

Vote weight
-----------
Each ballot's weight is computed once, from the voter's stakeholder record at
the moment of casting::

    weight = (base + reputation // 10 + min(participation, cap)) * multiplier // 100

with base 100, cap 50, and multiplier 150 for officials or 100 otherwise.
Later reputation changes never reweight a stored ballot.

Finalization
------------
Rates are percentages x100, truncated:

- participation_rate = participants * 10000 // total_stakeholders
- approval_rate      = votes_for * 10000 // (votes_for + votes_against)

A vision is approved iff participation >= QUORUM_THRESHOLD (3000) and
approval >= APPROVAL_THRESHOLD (6000); otherwise it is rejected.
"""

from typing import Optional

import structlog

from core.config import Settings, settings
from core.exceptions import (
    AlreadyVoted,
    InvalidInput,
    InvalidState,
    VotingClosed,
    VotingNotEnded,
)
from repositories.provider import UnitOfWork
from schemas.governance import (
    Ballot,
    FinalizeOutcome,
    RejectionReason,
    Stakeholder,
    StakeholderRole,
    Vision,
    VisionStatus,
    VoteDirection,
)
from services.stakeholder_registry import StakeholderRegistry
from services.vision_service import VisionService

logger = structlog.get_logger(__name__)

RATE_SCALE = 10000


def compute_vote_weight(stakeholder: Stakeholder, config: Settings = settings) -> int:
    """Compute a ballot weight from a stakeholder snapshot."""
    participation_bonus = min(stakeholder.participation_count, config.PARTICIPATION_BONUS_CAP)
    base = config.BASE_VOTE_WEIGHT + stakeholder.reputation // 10 + participation_bonus
    multiplier = (
        config.OFFICIAL_VOTE_MULTIPLIER
        if stakeholder.role == StakeholderRole.OFFICIAL
        else config.DEFAULT_VOTE_MULTIPLIER
    )
    return base * multiplier // 100


def participation_rate(total_participants: int, total_stakeholders: int) -> int:
    if total_stakeholders <= 0:
        return 0
    return total_participants * RATE_SCALE // total_stakeholders


def approval_rate(votes_for: int, votes_against: int) -> int:
    total = votes_for + votes_against
    if total <= 0:
        return 0
    return votes_for * RATE_SCALE // total


def evaluate_outcome(
    participation: int,
    approval: int,
    config: Settings = settings,
) -> tuple[VisionStatus, Optional[RejectionReason]]:
    """Decide approved/rejected from the two rates."""
    if participation < config.QUORUM_THRESHOLD:
        return VisionStatus.REJECTED, RejectionReason.INSUFFICIENT_PARTICIPATION
    if approval < config.APPROVAL_THRESHOLD:
        return VisionStatus.REJECTED, RejectionReason.INSUFFICIENT_APPROVAL
    return VisionStatus.APPROVED, None


def parse_direction(direction: VoteDirection | str | bool) -> VoteDirection:
    """Accept a direction tag or a boolean (True = for)."""
    if isinstance(direction, bool):
        return VoteDirection.FOR if direction else VoteDirection.AGAINST
    try:
        return VoteDirection(direction)
    except ValueError:
        raise InvalidInput(f"Unknown vote direction: {direction!r}") from None


def voting_open(vision: Vision, now: int) -> bool:
    return (
        vision.status == VisionStatus.VOTING
        and vision.voting_end is not None
        and now <= vision.voting_end
    )


class VotingEngine:
    """Service for casting ballots and finalizing votes."""

    def __init__(self, uow: UnitOfWork, owner: str, config: Settings = settings):
        self.uow = uow
        self.config = config
        self.registry = StakeholderRegistry(uow, config)
        self.visions = VisionService(uow, owner, config)

    async def cast_vote(
        self,
        caller: str,
        vision_id: int,
        direction: VoteDirection | str | bool,
        now: int,
    ) -> Ballot:
        """
        Cast the caller's ballot on a vision in voting.

        Raises, in order of precedence:
            VisionNotFound, NotRegistered, VotingClosed, AlreadyVoted.
        """
        parsed = parse_direction(direction)
        vision = await self.visions.require_vision(vision_id)
        voter = await self.registry.require(caller)

        if not voting_open(vision, now):
            raise VotingClosed(f"Voting on vision {vision_id} is not open")
        if await self.uow.ballots.exists(vision_id, caller):
            raise AlreadyVoted(f"{caller!r} has already voted on vision {vision_id}")

        weight = compute_vote_weight(voter, self.config)
        ballot = Ballot(
            vision_id=vision_id,
            voter=caller,
            direction=parsed,
            cast_at=now,
            weight=weight,
        )
        await self.uow.ballots.add(ballot)

        if parsed == VoteDirection.FOR:
            vision.votes_for += weight
        else:
            vision.votes_against += weight
        vision.total_participants += 1
        await self.uow.visions.save(vision)

        await self.registry.adjust_activity(caller, self.config.ACTIVITY_CAST_VOTE, now)

        logger.info(
            "vote_cast",
            vision_id=vision_id,
            voter=caller,
            direction=parsed.value,
            weight=weight,
        )
        return ballot

    async def finalize_voting(self, caller: str, vision_id: int, now: int) -> FinalizeOutcome:
        """
        Close voting and decide the outcome.

        Anyone may finalize once the window has ended. The transition happens
        once; a second call fails with InvalidState.
        """
        vision = await self.visions.require_vision(vision_id)
        if vision.status != VisionStatus.VOTING:
            raise InvalidState(f"Vision {vision_id} is {vision.status.value}, expected voting")
        if vision.voting_end is None or now < vision.voting_end:
            raise VotingNotEnded(f"Voting on vision {vision_id} ends at tick {vision.voting_end}")

        total_stakeholders = await self.registry.total()
        participation = participation_rate(vision.total_participants, total_stakeholders)
        approval = approval_rate(vision.votes_for, vision.votes_against)
        status, reason = evaluate_outcome(participation, approval, self.config)

        vision.status = status
        if status == VisionStatus.APPROVED:
            vision.implementation_start = now
            delta = self.config.ACTIVITY_VISION_APPROVED
        else:
            delta = self.config.ACTIVITY_VISION_REJECTED
        await self.uow.visions.save(vision)
        await self.registry.adjust_activity(vision.creator, delta, now)

        logger.info(
            "voting_finalized",
            vision_id=vision_id,
            finalized_by=caller,
            status=status.value,
            participation_rate=participation,
            approval_rate=approval,
            rejection_reason=reason.value if reason else None,
        )
        return FinalizeOutcome(
            vision_id=vision_id,
            status=status,
            participation_rate=participation,
            approval_rate=approval,
            rejection_reason=reason,
        )
