"""
SQL storage backend built on SQLAlchemy's async ORM.

One :class:`SqlUnitOfWork` wraps one ``AsyncSession`` transaction; every
repository in it shares that session, so an operation's writes either all
commit together or are rolled back together.
"""

from typing import Any, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models.ballot import BallotRow
from models.comment import CommentRow
from models.milestone import MilestoneRow
from models.sequence import SequenceRow
from models.stakeholder import StakeholderRow
from models.vision import VisionProgressRow, VisionRow
from schemas.governance import (
    Ballot,
    Comment,
    Milestone,
    Stakeholder,
    Vision,
    VisionProgress,
)

logger = structlog.get_logger(__name__)


def _copy_into(row: Any, values: dict[str, Any]) -> None:
    for key, value in values.items():
        setattr(row, key, value)


class _SqlRepository:
    def __init__(self, session: AsyncSession):
        self.db = session


class SqlStakeholderRepository(_SqlRepository):
    """Repository for stakeholder rows."""

    async def get(self, identity: str) -> Optional[Stakeholder]:
        row = await self.db.get(StakeholderRow, identity)
        return Stakeholder.model_validate(row) if row else None

    async def exists(self, identity: str) -> bool:
        return await self.db.get(StakeholderRow, identity) is not None

    async def add(self, stakeholder: Stakeholder) -> None:
        self.db.add(StakeholderRow(**stakeholder.model_dump(mode="json")))
        await self.db.flush()

    async def save(self, stakeholder: Stakeholder) -> None:
        row = await self.db.get(StakeholderRow, stakeholder.identity)
        if row is None:
            raise KeyError(f"stakeholder {stakeholder.identity!r} not stored")
        _copy_into(row, stakeholder.model_dump(mode="json", exclude={"identity"}))
        await self.db.flush()


class SqlVisionRepository(_SqlRepository):
    """Repository for vision rows."""

    async def get(self, vision_id: int) -> Optional[Vision]:
        row = await self.db.get(VisionRow, vision_id)
        return Vision.model_validate(row) if row else None

    async def add(self, vision: Vision) -> None:
        self.db.add(VisionRow(**vision.model_dump(mode="json")))
        await self.db.flush()

    async def save(self, vision: Vision) -> None:
        row = await self.db.get(VisionRow, vision.id)
        if row is None:
            raise KeyError(f"vision {vision.id} not stored")
        _copy_into(row, vision.model_dump(mode="json", exclude={"id"}))
        await self.db.flush()


class SqlBallotRepository(_SqlRepository):
    """Repository for ballot rows."""

    async def get(self, vision_id: int, voter: str) -> Optional[Ballot]:
        row = await self.db.get(BallotRow, (vision_id, voter))
        return Ballot.model_validate(row) if row else None

    async def exists(self, vision_id: int, voter: str) -> bool:
        return await self.db.get(BallotRow, (vision_id, voter)) is not None

    async def add(self, ballot: Ballot) -> None:
        self.db.add(BallotRow(**ballot.model_dump(mode="json")))
        await self.db.flush()


class SqlMilestoneRepository(_SqlRepository):
    """Repository for milestone rows."""

    async def get(self, vision_id: int, milestone_id: int) -> Optional[Milestone]:
        row = await self.db.get(MilestoneRow, (vision_id, milestone_id))
        return Milestone.model_validate(row) if row else None

    async def exists(self, vision_id: int, milestone_id: int) -> bool:
        return await self.db.get(MilestoneRow, (vision_id, milestone_id)) is not None

    async def add(self, milestone: Milestone) -> None:
        self.db.add(MilestoneRow(**milestone.model_dump(mode="json")))
        await self.db.flush()

    async def save(self, milestone: Milestone) -> None:
        row = await self.db.get(MilestoneRow, (milestone.vision_id, milestone.milestone_id))
        if row is None:
            raise KeyError(f"milestone ({milestone.vision_id}, {milestone.milestone_id}) not stored")
        _copy_into(row, milestone.model_dump(mode="json", exclude={"vision_id", "milestone_id"}))
        await self.db.flush()


class SqlProgressRepository(_SqlRepository):
    """Repository for vision progress rows."""

    async def get(self, vision_id: int) -> Optional[VisionProgress]:
        row = await self.db.get(VisionProgressRow, vision_id)
        return VisionProgress.model_validate(row) if row else None

    async def add(self, progress: VisionProgress) -> None:
        self.db.add(VisionProgressRow(**progress.model_dump(mode="json")))
        await self.db.flush()

    async def save(self, progress: VisionProgress) -> None:
        row = await self.db.get(VisionProgressRow, progress.vision_id)
        if row is None:
            raise KeyError(f"progress for vision {progress.vision_id} not stored")
        _copy_into(row, progress.model_dump(mode="json", exclude={"vision_id"}))
        await self.db.flush()


class SqlCommentRepository(_SqlRepository):
    """Repository for comment rows."""

    async def get(self, vision_id: int, comment_id: int) -> Optional[Comment]:
        row = await self.db.get(CommentRow, comment_id)
        if row is None or row.vision_id != vision_id:
            return None
        return Comment.model_validate(row)

    async def add(self, comment: Comment) -> None:
        self.db.add(CommentRow(**comment.model_dump(mode="json")))
        await self.db.flush()


class SqlSequenceRepository(_SqlRepository):
    """Named counters stored one row per name."""

    async def _row(self, name: str) -> SequenceRow:
        row = await self.db.get(SequenceRow, name, with_for_update=True)
        if row is None:
            row = SequenceRow(name=name, value=0)
            self.db.add(row)
        return row

    async def next_value(self, name: str) -> int:
        return await self.increment(name)

    async def increment(self, name: str, amount: int = 1) -> int:
        row = await self._row(name)
        row.value = (row.value or 0) + amount
        await self.db.flush()
        return row.value

    async def current(self, name: str) -> int:
        row = await self.db.get(SequenceRow, name)
        return row.value if row else 0


class SqlUnitOfWork:
    """Unit of work backed by a single ``AsyncSession`` transaction."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], readonly: bool = False):
        self._session_factory = session_factory
        self.readonly = readonly
        self.session: AsyncSession | None = None
        self._committed = False

    async def __aenter__(self) -> "SqlUnitOfWork":
        self.session = self._session_factory()
        self._committed = False
        self.stakeholders = SqlStakeholderRepository(self.session)
        self.visions = SqlVisionRepository(self.session)
        self.ballots = SqlBallotRepository(self.session)
        self.milestones = SqlMilestoneRepository(self.session)
        self.progress = SqlProgressRepository(self.session)
        self.comments = SqlCommentRepository(self.session)
        self.sequences = SqlSequenceRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if not self._committed:
                await self.rollback()
        finally:
            if self.session is not None:
                await self.session.close()
            self.session = None

    async def commit(self) -> None:
        if self.readonly:
            raise RuntimeError("cannot commit a read-only unit of work")
        if self.session is None:
            raise RuntimeError("unit of work has not been entered")
        await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
