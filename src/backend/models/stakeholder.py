"""
Stakeholder model for SQL storage.

One row per registered participant. Rows are created on registration and
only ever updated by the reputation/activity rule; they are never deleted.
"""

from sqlalchemy import BigInteger, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from schemas.governance import StakeholderRole


class StakeholderRow(Base):
    """Registered governance participant."""

    __tablename__ = "stakeholders"

    __table_args__ = (Index("ix_stakeholders_role", "role"),)

    identity: Mapped[str] = mapped_column(String(255), primary_key=True)
    registered_at: Mapped[int] = mapped_column(BigInteger)
    reputation: Mapped[int] = mapped_column(Integer, default=100)
    participation_count: Mapped[int] = mapped_column(Integer, default=0)
    last_active: Mapped[int] = mapped_column(BigInteger)
    role: Mapped[str] = mapped_column(String(20), default=StakeholderRole.RESIDENT.value)
