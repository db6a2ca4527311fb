"""
Vision and vision-progress models for SQL storage.

Vision rows carry the weighted voting tallies; they are updated in place while
voting is open and frozen afterwards. Each vision has exactly one progress row
created alongside it.
"""

from typing import Optional

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from schemas.governance import VisionStatus


class VisionRow(Base):
    """A governance proposal and its aggregated voting state."""

    __tablename__ = "visions"

    __table_args__ = (
        # Lifecycle queries ("visions currently in voting") filter on status
        Index("ix_visions_status_voting_end", "status", "voting_end"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)

    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(100), index=True)
    priority: Mapped[int] = mapped_column(Integer)

    creator: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("stakeholders.identity"),
        index=True,
    )
    created_at: Mapped[int] = mapped_column(BigInteger)

    status: Mapped[str] = mapped_column(String(20), default=VisionStatus.DRAFT.value)

    # Voting window and weighted tallies
    voting_start: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    voting_end: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    votes_for: Mapped[int] = mapped_column(BigInteger, default=0)
    votes_against: Mapped[int] = mapped_column(BigInteger, default=0)
    total_participants: Mapped[int] = mapped_column(Integer, default=0)

    implementation_start: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    estimated_completion: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)


class VisionProgressRow(Base):
    """Milestone roll-up for a vision (overall_progress is percent x100)."""

    __tablename__ = "vision_progress"

    vision_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("visions.id", ondelete="CASCADE"),
        primary_key=True,
    )
    total_milestones: Mapped[int] = mapped_column(Integer, default=0)
    completed_milestones: Mapped[int] = mapped_column(Integer, default=0)
    overall_progress: Mapped[int] = mapped_column(Integer, default=0)
    last_updated: Mapped[int] = mapped_column(BigInteger)
    next_review_date: Mapped[int] = mapped_column(BigInteger)
