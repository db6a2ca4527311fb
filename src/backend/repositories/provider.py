"""
Repository provider for dependency injection.

This module defines the storage interfaces the governance core depends on and
builds the configured implementation (in-memory or SQL).

Usage:
    from repositories.provider import build_unit_of_work_factory

    uow_factory = build_unit_of_work_factory()
    async with uow_factory() as uow:
        vision = await uow.visions.get(vision_id)
        ...
        await uow.commit()
"""

from typing import Callable, Optional, Protocol, runtime_checkable

import structlog

from core.config import settings
from schemas.governance import (
    Ballot,
    Comment,
    Milestone,
    Stakeholder,
    Vision,
    VisionProgress,
)

logger = structlog.get_logger(__name__)

# Sequence / counter names owned by the storage collaborator
VISION_SEQUENCE = "vision"
COMMENT_SEQUENCE = "comment"
STAKEHOLDER_COUNTER = "stakeholders"


# =============================================================================
# Repository Protocols (Interfaces)
# =============================================================================


@runtime_checkable
class StakeholderRepositoryProtocol(Protocol):
    """Protocol defining stakeholder repository operations."""

    async def get(self, identity: str) -> Optional[Stakeholder]: ...
    async def exists(self, identity: str) -> bool: ...
    async def add(self, stakeholder: Stakeholder) -> None: ...
    async def save(self, stakeholder: Stakeholder) -> None: ...


@runtime_checkable
class VisionRepositoryProtocol(Protocol):
    """Protocol defining vision repository operations."""

    async def get(self, vision_id: int) -> Optional[Vision]: ...
    async def add(self, vision: Vision) -> None: ...
    async def save(self, vision: Vision) -> None: ...


@runtime_checkable
class BallotRepositoryProtocol(Protocol):
    """Protocol defining ballot repository operations, keyed by (vision_id, voter)."""

    async def get(self, vision_id: int, voter: str) -> Optional[Ballot]: ...
    async def exists(self, vision_id: int, voter: str) -> bool: ...
    async def add(self, ballot: Ballot) -> None: ...


@runtime_checkable
class MilestoneRepositoryProtocol(Protocol):
    """Protocol defining milestone repository operations, keyed by (vision_id, milestone_id)."""

    async def get(self, vision_id: int, milestone_id: int) -> Optional[Milestone]: ...
    async def exists(self, vision_id: int, milestone_id: int) -> bool: ...
    async def add(self, milestone: Milestone) -> None: ...
    async def save(self, milestone: Milestone) -> None: ...


@runtime_checkable
class ProgressRepositoryProtocol(Protocol):
    """Protocol defining vision progress repository operations."""

    async def get(self, vision_id: int) -> Optional[VisionProgress]: ...
    async def add(self, progress: VisionProgress) -> None: ...
    async def save(self, progress: VisionProgress) -> None: ...


@runtime_checkable
class CommentRepositoryProtocol(Protocol):
    """Protocol defining comment repository operations."""

    async def get(self, vision_id: int, comment_id: int) -> Optional[Comment]: ...
    async def add(self, comment: Comment) -> None: ...


@runtime_checkable
class SequenceRepositoryProtocol(Protocol):
    """
    Protocol for process-wide sequences and counters.

    ``next_value`` allocates and returns the next id (starting at 1);
    ``increment`` bumps a counter; ``current`` reads either without changing it.
    """

    async def next_value(self, name: str) -> int: ...
    async def increment(self, name: str, amount: int = 1) -> int: ...
    async def current(self, name: str) -> int: ...


@runtime_checkable
class UnitOfWork(Protocol):
    """
    Transaction boundary shared by every repository of one operation.

    Leaving the ``async with`` block without calling ``commit`` (or by raising)
    discards every change made through the repositories.
    """

    stakeholders: StakeholderRepositoryProtocol
    visions: VisionRepositoryProtocol
    ballots: BallotRepositoryProtocol
    milestones: MilestoneRepositoryProtocol
    progress: ProgressRepositoryProtocol
    comments: CommentRepositoryProtocol
    sequences: SequenceRepositoryProtocol

    async def __aenter__(self) -> "UnitOfWork": ...
    async def __aexit__(self, exc_type, exc, tb) -> None: ...
    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...


UnitOfWorkFactory = Callable[..., UnitOfWork]


# =============================================================================
# Factory
# =============================================================================


def build_unit_of_work_factory(backend: str | None = None) -> UnitOfWorkFactory:
    """
    Build the unit-of-work factory for the configured storage backend.

    The returned callable accepts ``readonly=True`` for query-only units.
    """
    backend = backend or settings.STORAGE_BACKEND
    if backend == "memory":
        from repositories.memory import InMemoryStore

        logger.info("storage_backend_selected", backend="memory")
        return InMemoryStore().unit_of_work
    if backend == "sql":
        from db.session import get_session_factory
        from repositories.sql import SqlUnitOfWork

        logger.info("storage_backend_selected", backend="sql")
        session_factory = get_session_factory()

        def factory(readonly: bool = False) -> SqlUnitOfWork:
            return SqlUnitOfWork(session_factory, readonly=readonly)

        return factory
    raise ValueError(f"Unknown storage backend: {backend}")
