"""
Vote-related Pydantic schemas (API layer).
"""

from pydantic import BaseModel

from schemas.governance import VoteDirection


class VoteCreate(BaseModel):
    """Schema for casting a weighted ballot."""

    vision_id: int
    direction: VoteDirection


class VoteEligibility(BaseModel):
    """Whether the caller may vote on a vision right now."""

    vision_id: int
    identity: str
    can_vote: bool
