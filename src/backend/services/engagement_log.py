"""
Engagement log: append-only comments on visions, optionally threaded.
"""

from typing import Optional

import structlog

from core.config import Settings, settings
from core.exceptions import InvalidInput
from repositories.provider import COMMENT_SEQUENCE, UnitOfWork
from schemas.governance import Comment
from services.stakeholder_registry import StakeholderRegistry
from services.vision_service import VisionService

logger = structlog.get_logger(__name__)


class EngagementLog:
    """Service for posting comments."""

    def __init__(self, uow: UnitOfWork, owner: str, config: Settings = settings):
        self.uow = uow
        self.config = config
        self.registry = StakeholderRegistry(uow, config)
        self.visions = VisionService(uow, owner, config)

    async def add_comment(
        self,
        caller: str,
        vision_id: int,
        content: str,
        now: int,
        parent_comment_id: Optional[int] = None,
    ) -> Comment:
        """
        Append a comment to a vision.

        Parent references are stored as given unless VALIDATE_COMMENT_PARENTS
        is enabled, in which case the parent must exist on the same vision.
        """
        await self.visions.require_vision(vision_id)
        await self.registry.require(caller)

        if not content:
            raise InvalidInput("Comment content is required")
        if len(content) > self.config.COMMENT_MAX_LENGTH:
            raise InvalidInput(f"Comment exceeds {self.config.COMMENT_MAX_LENGTH} characters")
        if parent_comment_id is not None and self.config.VALIDATE_COMMENT_PARENTS:
            if await self.uow.comments.get(vision_id, parent_comment_id) is None:
                raise InvalidInput(f"Parent comment {parent_comment_id} not found on vision {vision_id}")

        comment_id = await self.uow.sequences.next_value(COMMENT_SEQUENCE)
        comment = Comment(
            vision_id=vision_id,
            comment_id=comment_id,
            author=caller,
            content=content,
            created_at=now,
            parent_comment_id=parent_comment_id,
        )
        await self.uow.comments.add(comment)
        await self.registry.adjust_activity(caller, self.config.ACTIVITY_COMMENT, now)

        logger.info(
            "comment_added",
            vision_id=vision_id,
            comment_id=comment_id,
            author=caller,
            parent_comment_id=parent_comment_id,
        )
        return comment
