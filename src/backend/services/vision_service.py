"""
Vision lifecycle service.

Creates visions and drives the draft -> voting transition. Later transitions
belong to the voting engine (approved/rejected) and the milestone tracker
(completed).
"""

import structlog

from core.config import Settings, settings
from core.exceptions import InvalidState, InvalidVision, NotAuthorized, VisionNotFound
from repositories.provider import VISION_SEQUENCE, UnitOfWork
from schemas.governance import Vision, VisionProgress, VisionStatus
from services.stakeholder_registry import StakeholderRegistry

logger = structlog.get_logger(__name__)


class VisionService:
    """Service for creating visions and opening them for voting."""

    def __init__(self, uow: UnitOfWork, owner: str, config: Settings = settings):
        self.uow = uow
        self.owner = owner
        self.config = config
        self.registry = StakeholderRegistry(uow, config)

    async def require_vision(self, vision_id: int) -> Vision:
        vision = await self.uow.visions.get(vision_id)
        if vision is None:
            raise VisionNotFound(f"Vision {vision_id} not found")
        return vision

    def can_manage(self, caller: str, vision: Vision) -> bool:
        """Creators and the governance owner may manage a vision."""
        return caller == vision.creator or caller == self.owner

    def _validate(
        self,
        title: str,
        description: str,
        category: str,
        priority: int,
        estimated_offset: int,
    ) -> None:
        cfg = self.config
        if not title:
            raise InvalidVision("Title is required")
        if len(title) > cfg.TITLE_MAX_LENGTH:
            raise InvalidVision(f"Title exceeds {cfg.TITLE_MAX_LENGTH} characters")
        if len(description) <= cfg.DESCRIPTION_MIN_LENGTH:
            raise InvalidVision(f"Description must be longer than {cfg.DESCRIPTION_MIN_LENGTH} characters")
        if len(description) > cfg.DESCRIPTION_MAX_LENGTH:
            raise InvalidVision(f"Description exceeds {cfg.DESCRIPTION_MAX_LENGTH} characters")
        if len(category) > cfg.CATEGORY_MAX_LENGTH:
            raise InvalidVision(f"Category exceeds {cfg.CATEGORY_MAX_LENGTH} characters")
        if not 1 <= priority <= 5:
            raise InvalidVision("Priority must be between 1 and 5")
        if estimated_offset < 0:
            raise InvalidVision("Estimated completion offset cannot be negative")

    async def create_vision(
        self,
        caller: str,
        title: str,
        description: str,
        category: str,
        priority: int,
        estimated_offset: int,
        now: int,
    ) -> Vision:
        """
        Create a vision in draft status together with its progress record.

        Input is validated before the caller's registration is checked.
        """
        self._validate(title, description, category, priority, estimated_offset)
        await self.registry.require(caller)

        vision_id = await self.uow.sequences.next_value(VISION_SEQUENCE)
        vision = Vision(
            id=vision_id,
            title=title,
            description=description,
            creator=caller,
            created_at=now,
            status=VisionStatus.DRAFT,
            estimated_completion=now + estimated_offset,
            category=category,
            priority=priority,
        )
        await self.uow.visions.add(vision)
        await self.uow.progress.add(
            VisionProgress(
                vision_id=vision_id,
                last_updated=now,
                next_review_date=now + self.config.REVIEW_INTERVAL_TICKS,
            )
        )
        await self.registry.adjust_activity(caller, self.config.ACTIVITY_CREATE_VISION, now)

        logger.info("vision_created", vision_id=vision_id, creator=caller, category=category)
        return vision

    async def start_voting(self, caller: str, vision_id: int, now: int) -> Vision:
        """Open the voting window on a draft vision."""
        vision = await self.require_vision(vision_id)
        if not self.can_manage(caller, vision):
            raise NotAuthorized("Only the creator or the governance owner can start voting")
        if vision.status != VisionStatus.DRAFT:
            raise InvalidState(f"Vision {vision_id} is {vision.status.value}, expected draft")

        vision.status = VisionStatus.VOTING
        vision.voting_start = now
        vision.voting_end = now + self.config.VOTING_PERIOD_TICKS
        await self.uow.visions.save(vision)

        logger.info(
            "voting_started",
            vision_id=vision_id,
            voting_start=vision.voting_start,
            voting_end=vision.voting_end,
        )
        return vision
