"""
In-memory storage backend.

Used for tests, local development and single-process embedding. Each write
unit of work stages its changes on a private copy of the tables and swaps
them in on commit, so readers only ever see fully committed state.

Records are copied on the way in and on the way out; a caller mutating a
record it read has no effect until it calls ``save``.
"""

from dataclasses import dataclass, field
from typing import Optional

import structlog

from schemas.governance import (
    Ballot,
    Comment,
    Milestone,
    Stakeholder,
    Vision,
    VisionProgress,
)

logger = structlog.get_logger(__name__)


@dataclass
class _Tables:
    stakeholders: dict[str, Stakeholder] = field(default_factory=dict)
    visions: dict[int, Vision] = field(default_factory=dict)
    ballots: dict[tuple[int, str], Ballot] = field(default_factory=dict)
    milestones: dict[tuple[int, int], Milestone] = field(default_factory=dict)
    progress: dict[int, VisionProgress] = field(default_factory=dict)
    comments: dict[int, Comment] = field(default_factory=dict)
    sequences: dict[str, int] = field(default_factory=dict)

    def clone(self) -> "_Tables":
        # Stored records are never mutated in place, so copying the
        # containers is enough to isolate a staged transaction.
        return _Tables(
            stakeholders=dict(self.stakeholders),
            visions=dict(self.visions),
            ballots=dict(self.ballots),
            milestones=dict(self.milestones),
            progress=dict(self.progress),
            comments=dict(self.comments),
            sequences=dict(self.sequences),
        )


class _ReadOnlyError(RuntimeError):
    pass


class _Repository:
    def __init__(self, tables: _Tables, readonly: bool):
        self._tables = tables
        self._readonly = readonly

    def _check_writable(self) -> None:
        if self._readonly:
            raise _ReadOnlyError("unit of work is read-only")


class InMemoryStakeholderRepository(_Repository):
    async def get(self, identity: str) -> Optional[Stakeholder]:
        record = self._tables.stakeholders.get(identity)
        return record.model_copy() if record else None

    async def exists(self, identity: str) -> bool:
        return identity in self._tables.stakeholders

    async def add(self, stakeholder: Stakeholder) -> None:
        self._check_writable()
        if stakeholder.identity in self._tables.stakeholders:
            raise KeyError(f"stakeholder {stakeholder.identity!r} already stored")
        self._tables.stakeholders[stakeholder.identity] = stakeholder.model_copy()

    async def save(self, stakeholder: Stakeholder) -> None:
        self._check_writable()
        self._tables.stakeholders[stakeholder.identity] = stakeholder.model_copy()


class InMemoryVisionRepository(_Repository):
    async def get(self, vision_id: int) -> Optional[Vision]:
        record = self._tables.visions.get(vision_id)
        return record.model_copy() if record else None

    async def add(self, vision: Vision) -> None:
        self._check_writable()
        if vision.id in self._tables.visions:
            raise KeyError(f"vision {vision.id} already stored")
        self._tables.visions[vision.id] = vision.model_copy()

    async def save(self, vision: Vision) -> None:
        self._check_writable()
        self._tables.visions[vision.id] = vision.model_copy()


class InMemoryBallotRepository(_Repository):
    async def get(self, vision_id: int, voter: str) -> Optional[Ballot]:
        record = self._tables.ballots.get((vision_id, voter))
        return record.model_copy() if record else None

    async def exists(self, vision_id: int, voter: str) -> bool:
        return (vision_id, voter) in self._tables.ballots

    async def add(self, ballot: Ballot) -> None:
        self._check_writable()
        key = (ballot.vision_id, ballot.voter)
        if key in self._tables.ballots:
            raise KeyError(f"ballot {key} already stored")
        self._tables.ballots[key] = ballot.model_copy()


class InMemoryMilestoneRepository(_Repository):
    async def get(self, vision_id: int, milestone_id: int) -> Optional[Milestone]:
        record = self._tables.milestones.get((vision_id, milestone_id))
        return record.model_copy() if record else None

    async def exists(self, vision_id: int, milestone_id: int) -> bool:
        return (vision_id, milestone_id) in self._tables.milestones

    async def add(self, milestone: Milestone) -> None:
        self._check_writable()
        key = (milestone.vision_id, milestone.milestone_id)
        if key in self._tables.milestones:
            raise KeyError(f"milestone {key} already stored")
        self._tables.milestones[key] = milestone.model_copy()

    async def save(self, milestone: Milestone) -> None:
        self._check_writable()
        self._tables.milestones[(milestone.vision_id, milestone.milestone_id)] = milestone.model_copy()


class InMemoryProgressRepository(_Repository):
    async def get(self, vision_id: int) -> Optional[VisionProgress]:
        record = self._tables.progress.get(vision_id)
        return record.model_copy() if record else None

    async def add(self, progress: VisionProgress) -> None:
        self._check_writable()
        if progress.vision_id in self._tables.progress:
            raise KeyError(f"progress for vision {progress.vision_id} already stored")
        self._tables.progress[progress.vision_id] = progress.model_copy()

    async def save(self, progress: VisionProgress) -> None:
        self._check_writable()
        self._tables.progress[progress.vision_id] = progress.model_copy()


class InMemoryCommentRepository(_Repository):
    async def get(self, vision_id: int, comment_id: int) -> Optional[Comment]:
        record = self._tables.comments.get(comment_id)
        if record is None or record.vision_id != vision_id:
            return None
        return record.model_copy()

    async def add(self, comment: Comment) -> None:
        self._check_writable()
        if comment.comment_id in self._tables.comments:
            raise KeyError(f"comment {comment.comment_id} already stored")
        self._tables.comments[comment.comment_id] = comment.model_copy()


class InMemorySequenceRepository(_Repository):
    async def next_value(self, name: str) -> int:
        return await self.increment(name)

    async def increment(self, name: str, amount: int = 1) -> int:
        self._check_writable()
        value = self._tables.sequences.get(name, 0) + amount
        self._tables.sequences[name] = value
        return value

    async def current(self, name: str) -> int:
        return self._tables.sequences.get(name, 0)


class InMemoryUnitOfWork:
    """Unit of work over an :class:`InMemoryStore`."""

    def __init__(self, store: "InMemoryStore", readonly: bool = False):
        self._store = store
        self.readonly = readonly
        self._tables: _Tables | None = None
        self._committed = False

    def _bind(self, tables: _Tables) -> None:
        self._tables = tables
        self.stakeholders = InMemoryStakeholderRepository(tables, self.readonly)
        self.visions = InMemoryVisionRepository(tables, self.readonly)
        self.ballots = InMemoryBallotRepository(tables, self.readonly)
        self.milestones = InMemoryMilestoneRepository(tables, self.readonly)
        self.progress = InMemoryProgressRepository(tables, self.readonly)
        self.comments = InMemoryCommentRepository(tables, self.readonly)
        self.sequences = InMemorySequenceRepository(tables, self.readonly)

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        # Readers see the committed tables as of entry; writers get a staging copy.
        tables = self._store.tables if self.readonly else self._store.tables.clone()
        self._bind(tables)
        self._committed = False
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if not self._committed:
            await self.rollback()

    async def commit(self) -> None:
        if self.readonly:
            raise _ReadOnlyError("cannot commit a read-only unit of work")
        if self._tables is None:
            raise RuntimeError("unit of work has not been entered")
        self._store.tables = self._tables
        self._committed = True

    async def rollback(self) -> None:
        self._tables = None


class InMemoryStore:
    """
    Process-local store holding the committed tables.

    The store supports one writer at a time; the governance engine
    serializes writers before opening a unit of work.
    """

    def __init__(self) -> None:
        self.tables = _Tables()

    def unit_of_work(self, readonly: bool = False) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self, readonly=readonly)
