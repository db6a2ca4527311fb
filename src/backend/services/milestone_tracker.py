"""
Milestone tracker.

Manages the milestones of approved visions and rolls their completion up into
the vision's progress record. When the last milestone completes, the vision
itself moves to completed.

Roll-up runs once per milestone, on the first transition into completed.
A milestone that is moved away from completed and back again keeps its
original completion date and is not counted twice.
"""

from typing import Optional

import structlog

from core.config import Settings, settings
from core.exceptions import (
    DuplicateMilestone,
    InvalidMilestone,
    InvalidState,
    InvalidStatus,
    MilestoneNotFound,
    NotAuthorized,
    VisionNotFound,
)
from repositories.provider import UnitOfWork
from schemas.governance import (
    Milestone,
    MilestoneStatus,
    Vision,
    VisionProgress,
    VisionStatus,
)
from services.vision_service import VisionService

logger = structlog.get_logger(__name__)


def parse_milestone_status(status: MilestoneStatus | str) -> MilestoneStatus:
    try:
        return MilestoneStatus(status)
    except ValueError:
        raise InvalidStatus(f"Unknown milestone status: {status!r}") from None


def progress_percentage(completed: int, total: int) -> int:
    """Completed share in percent x100, truncated; 0 when there are no milestones."""
    if total <= 0:
        return 0
    return completed * 10000 // total


class MilestoneTracker:
    """Service for milestone creation, status updates and progress roll-up."""

    def __init__(self, uow: UnitOfWork, owner: str, config: Settings = settings):
        self.uow = uow
        self.owner = owner
        self.config = config
        self.visions = VisionService(uow, owner, config)

    async def _require_progress(self, vision_id: int) -> VisionProgress:
        progress = await self.uow.progress.get(vision_id)
        if progress is None:
            raise VisionNotFound(f"Progress record for vision {vision_id} not found")
        return progress

    async def add_milestone(
        self,
        caller: str,
        vision_id: int,
        milestone_id: int,
        title: str,
        description: str,
        target_date: int,
        now: int,
        responsible_party: Optional[str] = None,
    ) -> Milestone:
        """
        Attach a pending milestone to an approved vision.

        Raises, in order of precedence:
            VisionNotFound, NotAuthorized, InvalidState, DuplicateMilestone,
            InvalidMilestone.
        """
        vision = await self.visions.require_vision(vision_id)
        progress = await self._require_progress(vision_id)

        if not self.visions.can_manage(caller, vision):
            raise NotAuthorized("Only the creator or the governance owner can add milestones")
        if vision.status != VisionStatus.APPROVED:
            raise InvalidState(f"Vision {vision_id} is {vision.status.value}, expected approved")
        if await self.uow.milestones.exists(vision_id, milestone_id):
            raise DuplicateMilestone(f"Milestone {milestone_id} already exists on vision {vision_id}")
        if milestone_id < 0:
            raise InvalidMilestone("Milestone id cannot be negative")
        if not title:
            raise InvalidMilestone("Milestone title is required")

        milestone = Milestone(
            vision_id=vision_id,
            milestone_id=milestone_id,
            title=title,
            description=description,
            target_date=target_date,
            status=MilestoneStatus.PENDING,
            responsible_party=responsible_party,
        )
        await self.uow.milestones.add(milestone)

        progress.total_milestones += 1
        progress.last_updated = now
        await self.uow.progress.save(progress)

        logger.info(
            "milestone_added",
            vision_id=vision_id,
            milestone_id=milestone_id,
            total_milestones=progress.total_milestones,
        )
        return milestone

    async def update_milestone_status(
        self,
        caller: str,
        vision_id: int,
        milestone_id: int,
        new_status: MilestoneStatus | str,
        now: int,
        evidence: Optional[str] = None,
    ) -> Milestone:
        """
        Move a milestone to ``new_status`` and overwrite its evidence.

        Raises, in order of precedence:
            VisionNotFound, MilestoneNotFound, NotAuthorized, InvalidStatus.
        """
        vision = await self.visions.require_vision(vision_id)
        milestone = await self.uow.milestones.get(vision_id, milestone_id)
        if milestone is None:
            raise MilestoneNotFound(f"Milestone {milestone_id} not found on vision {vision_id}")

        if not (self.visions.can_manage(caller, vision) or caller == milestone.responsible_party):
            raise NotAuthorized("Only the creator, the owner or the responsible party can update a milestone")
        status = parse_milestone_status(new_status)

        first_completion = status == MilestoneStatus.COMPLETED and milestone.completion_date is None

        milestone.status = status
        milestone.evidence = evidence
        if first_completion:
            milestone.completion_date = now
        await self.uow.milestones.save(milestone)

        logger.info(
            "milestone_status_updated",
            vision_id=vision_id,
            milestone_id=milestone_id,
            status=status.value,
        )

        if first_completion:
            await self._record_completion(vision, now)
        return milestone

    async def _record_completion(self, vision: Vision, now: int) -> VisionProgress:
        """Count one newly completed milestone and complete the vision when all are done."""
        progress = await self._require_progress(vision.id)

        progress.completed_milestones += 1
        progress.overall_progress = progress_percentage(
            progress.completed_milestones, progress.total_milestones
        )
        progress.last_updated = now
        progress.next_review_date = now + self.config.REVIEW_INTERVAL_TICKS
        await self.uow.progress.save(progress)

        logger.info(
            "milestone_completed",
            vision_id=vision.id,
            completed=progress.completed_milestones,
            total=progress.total_milestones,
            overall_progress=progress.overall_progress,
        )

        if progress.completed_milestones == progress.total_milestones:
            vision.status = VisionStatus.COMPLETED
            await self.uow.visions.save(vision)
            logger.info("vision_completed", vision_id=vision.id)

        return progress
