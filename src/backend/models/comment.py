"""
Comment model for SQL storage.

parent_comment_id is not a foreign key: parent references are
stored as given unless the engagement log is configured to validate them.
"""

from typing import Optional

from sqlalchemy import BigInteger, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class CommentRow(Base):
    """Engagement log entry on a vision."""

    __tablename__ = "comments"

    __table_args__ = (Index("ix_comments_vision_created", "vision_id", "created_at"),)

    comment_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    vision_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("visions.id", ondelete="CASCADE"),
    )
    author: Mapped[str] = mapped_column(String(255), ForeignKey("stakeholders.identity"))
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[int] = mapped_column(BigInteger)
    parent_comment_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
