"""
Milestone model for SQL storage.
"""

from typing import Optional

from sqlalchemy import BigInteger, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from schemas.governance import MilestoneStatus


class MilestoneRow(Base):
    """Implementation milestone keyed by (vision_id, caller-supplied milestone_id)."""

    __tablename__ = "milestones"

    __table_args__ = (Index("ix_milestones_vision_status", "vision_id", "status"),)

    vision_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("visions.id", ondelete="CASCADE"),
        primary_key=True,
    )
    milestone_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)

    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    target_date: Mapped[int] = mapped_column(BigInteger)
    status: Mapped[str] = mapped_column(String(20), default=MilestoneStatus.PENDING.value)

    # Set once on first completion, never cleared
    completion_date: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    evidence: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    responsible_party: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
