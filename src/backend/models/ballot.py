"""
Ballot model for SQL storage.

The composite primary key (vision_id, voter) enforces one ballot per voter
per vision at the database level as well as in the voting engine.
"""

from sqlalchemy import BigInteger, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class BallotRow(Base):
    """A weighted ballot. Weight is fixed when the ballot is cast."""

    __tablename__ = "ballots"

    vision_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("visions.id", ondelete="CASCADE"),
        primary_key=True,
    )
    voter: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("stakeholders.identity"),
        primary_key=True,
    )
    direction: Mapped[str] = mapped_column(String(10))
    cast_at: Mapped[int] = mapped_column(BigInteger)
    weight: Mapped[int] = mapped_column(Integer)
