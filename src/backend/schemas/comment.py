"""
Comment-related Pydantic schemas (API layer).
"""

from typing import Optional

from pydantic import BaseModel


class CommentCreate(BaseModel):
    content: str
    parent_comment_id: Optional[int] = None


class CommentCreated(BaseModel):
    comment_id: int
