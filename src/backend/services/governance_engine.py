"""
Governance engine facade.

Composes the registry, vision lifecycle, voting engine, milestone tracker,
engagement log and query surface over injected storage and clock
collaborators.

Every mutating operation:
1. takes the single writer lock (mutations never interleave),
2. reads the clock once and uses that tick throughout,
3. runs inside one unit of work that commits only if the whole operation
   succeeds; any error rolls back every change it made.

Reads do not take the writer lock and observe the latest committed state.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog

from core.clock import BlockHeightClock, Clock
from core.config import Settings, settings
from core.exceptions import GovernanceError, InvalidState
from repositories.provider import UnitOfWork, UnitOfWorkFactory, build_unit_of_work_factory
from schemas.governance import (
    Ballot,
    Comment,
    FinalizeOutcome,
    Milestone,
    MilestoneStatus,
    Stakeholder,
    StakeholderRole,
    SystemStats,
    Vision,
    VisionProgress,
    VoteDirection,
    VotingResults,
)
from services.engagement_log import EngagementLog
from services.milestone_tracker import MilestoneTracker
from services.query_service import QueryService
from services.stakeholder_registry import StakeholderRegistry
from services.vision_service import VisionService
from services.voting_engine import VotingEngine

logger = structlog.get_logger(__name__)


class GovernanceEngine:
    """
    Single-writer governance state machine.

    Usage:
        engine = GovernanceEngine(InMemoryStore().unit_of_work, ManualClock())
        await engine.register_stakeholder("alice", "resident")
        vision = await engine.create_vision("alice", "Park", "A new riverside park", "parks", 3, 5000)
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        owner: str | None = None,
        config: Settings = settings,
    ):
        self._uow_factory = uow_factory
        self.clock = clock
        self.owner = owner or config.GOVERNANCE_OWNER
        self.config = config
        self._write_lock = asyncio.Lock()

    # =========================================================================
    # Transaction plumbing
    # =========================================================================

    @asynccontextmanager
    async def _mutation(self, operation: str) -> AsyncGenerator[tuple[UnitOfWork, int], None]:
        if not self.config.GOVERNANCE_ENABLED:
            raise InvalidState("Governance is disabled")

        async with self._write_lock:
            now = self.clock.now()
            async with self._uow_factory() as uow:
                try:
                    yield uow, now
                except GovernanceError as exc:
                    logger.info(
                        "governance_operation_rejected",
                        operation=operation,
                        error=exc.code,
                        detail=exc.message,
                        tick=now,
                    )
                    raise
                await uow.commit()

    @asynccontextmanager
    async def _read(self) -> AsyncGenerator[QueryService, None]:
        async with self._uow_factory(readonly=True) as uow:
            yield QueryService(uow, self.config)

    # =========================================================================
    # Stakeholder Registry
    # =========================================================================

    async def register_stakeholder(self, caller: str, role: StakeholderRole | str) -> Stakeholder:
        async with self._mutation("register") as (uow, now):
            return await StakeholderRegistry(uow, self.config).register(caller, role, now)

    # =========================================================================
    # Vision lifecycle
    # =========================================================================

    async def create_vision(
        self,
        caller: str,
        title: str,
        description: str,
        category: str,
        priority: int,
        estimated_offset: int,
    ) -> Vision:
        async with self._mutation("create_vision") as (uow, now):
            service = VisionService(uow, self.owner, self.config)
            return await service.create_vision(
                caller, title, description, category, priority, estimated_offset, now
            )

    async def start_voting(self, caller: str, vision_id: int) -> Vision:
        async with self._mutation("start_voting") as (uow, now):
            return await VisionService(uow, self.owner, self.config).start_voting(caller, vision_id, now)

    # =========================================================================
    # Voting
    # =========================================================================

    async def cast_vote(
        self,
        caller: str,
        vision_id: int,
        direction: VoteDirection | str | bool,
    ) -> Ballot:
        async with self._mutation("cast_vote") as (uow, now):
            return await VotingEngine(uow, self.owner, self.config).cast_vote(
                caller, vision_id, direction, now
            )

    async def finalize_voting(self, caller: str, vision_id: int) -> FinalizeOutcome:
        async with self._mutation("finalize_voting") as (uow, now):
            return await VotingEngine(uow, self.owner, self.config).finalize_voting(caller, vision_id, now)

    # =========================================================================
    # Milestones
    # =========================================================================

    async def add_milestone(
        self,
        caller: str,
        vision_id: int,
        milestone_id: int,
        title: str,
        description: str,
        target_date: int,
        responsible_party: Optional[str] = None,
    ) -> Milestone:
        async with self._mutation("add_milestone") as (uow, now):
            return await MilestoneTracker(uow, self.owner, self.config).add_milestone(
                caller,
                vision_id,
                milestone_id,
                title,
                description,
                target_date,
                now,
                responsible_party=responsible_party,
            )

    async def update_milestone_status(
        self,
        caller: str,
        vision_id: int,
        milestone_id: int,
        new_status: MilestoneStatus | str,
        evidence: Optional[str] = None,
    ) -> Milestone:
        async with self._mutation("update_milestone_status") as (uow, now):
            return await MilestoneTracker(uow, self.owner, self.config).update_milestone_status(
                caller, vision_id, milestone_id, new_status, now, evidence=evidence
            )

    # =========================================================================
    # Engagement
    # =========================================================================

    async def add_comment(
        self,
        caller: str,
        vision_id: int,
        content: str,
        parent_comment_id: Optional[int] = None,
    ) -> Comment:
        async with self._mutation("add_comment") as (uow, now):
            return await EngagementLog(uow, self.owner, self.config).add_comment(
                caller, vision_id, content, now, parent_comment_id=parent_comment_id
            )

    # =========================================================================
    # Query surface
    # =========================================================================

    async def get_vision(self, vision_id: int) -> Optional[Vision]:
        async with self._read() as query:
            return await query.get_vision(vision_id)

    async def get_stakeholder(self, identity: str) -> Optional[Stakeholder]:
        async with self._read() as query:
            return await query.get_stakeholder(identity)

    async def get_vote(self, vision_id: int, voter: str) -> Optional[Ballot]:
        async with self._read() as query:
            return await query.get_vote(vision_id, voter)

    async def get_milestone(self, vision_id: int, milestone_id: int) -> Optional[Milestone]:
        async with self._read() as query:
            return await query.get_milestone(vision_id, milestone_id)

    async def get_vision_progress(self, vision_id: int) -> Optional[VisionProgress]:
        async with self._read() as query:
            return await query.get_vision_progress(vision_id)

    async def get_comment(self, vision_id: int, comment_id: int) -> Optional[Comment]:
        async with self._read() as query:
            return await query.get_comment(vision_id, comment_id)

    async def get_voting_results(self, vision_id: int) -> Optional[VotingResults]:
        async with self._read() as query:
            return await query.get_voting_results(vision_id)

    async def can_vote(self, vision_id: int, identity: str) -> bool:
        now = self.clock.now()
        async with self._read() as query:
            return await query.can_vote(vision_id, identity, now)

    async def get_system_stats(self) -> SystemStats:
        async with self._read() as query:
            return await query.get_system_stats()


# Process-wide engine used by the HTTP layer
_engine: GovernanceEngine | None = None


def get_governance_engine() -> GovernanceEngine:
    """Get or create the application's governance engine from settings."""
    global _engine
    if _engine is None:
        _engine = GovernanceEngine(build_unit_of_work_factory(), BlockHeightClock())
        logger.info(
            "governance_engine_created",
            backend=settings.STORAGE_BACKEND,
            owner=_engine.owner,
        )
    return _engine


def set_governance_engine(engine: GovernanceEngine | None) -> None:
    """Replace (or clear) the process-wide engine, e.g. in tests."""
    global _engine
    _engine = engine
