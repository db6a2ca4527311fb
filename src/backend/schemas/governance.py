"""
Governance domain records.

These pydantic models are the records the governance core reads and writes
through the repositories. The in-memory store keeps them directly; the SQL
store converts ORM rows into them with ``model_validate`` (from_attributes).
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class StakeholderRole(str, Enum):
    """Role classification of a registered participant."""

    RESIDENT = "resident"
    BUSINESS = "business"
    ORGANIZATION = "organization"
    OFFICIAL = "official"


class VisionStatus(str, Enum):
    """
    Vision lifecycle status.

    draft -> voting -> approved | rejected; approved -> completed once every
    milestone has been completed. rejected and completed are terminal.
    """

    DRAFT = "draft"
    VOTING = "voting"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class VoteDirection(str, Enum):
    FOR = "for"
    AGAINST = "against"


class MilestoneStatus(str, Enum):
    """Milestone status. completed is terminal; delayed can be left again."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELAYED = "delayed"


class RejectionReason(str, Enum):
    """Why a finalized vision was rejected."""

    INSUFFICIENT_PARTICIPATION = "insufficient_participation"
    INSUFFICIENT_APPROVAL = "insufficient_approval"


class Stakeholder(BaseModel):
    """A registered participant."""

    identity: str
    registered_at: int
    reputation: int = Field(..., ge=1)
    participation_count: int = Field(0, ge=0)
    last_active: int
    role: StakeholderRole

    model_config = {"from_attributes": True}


class Vision(BaseModel):
    """A proposal moving through the governance lifecycle."""

    id: int
    title: str
    description: str
    creator: str
    created_at: int
    status: VisionStatus = VisionStatus.DRAFT
    voting_start: Optional[int] = None
    voting_end: Optional[int] = None
    votes_for: int = 0
    votes_against: int = 0
    total_participants: int = 0
    implementation_start: Optional[int] = None
    estimated_completion: Optional[int] = None
    category: str
    priority: int = Field(..., ge=1, le=5)

    model_config = {"from_attributes": True}


class Ballot(BaseModel):
    """
    One voter's ballot on one vision.

    The weight is computed when the ballot is cast and never recomputed.
    """

    vision_id: int
    voter: str
    direction: VoteDirection
    cast_at: int
    weight: int = Field(..., ge=0)

    model_config = {"from_attributes": True}


class Milestone(BaseModel):
    """A tracked implementation step of an approved vision."""

    vision_id: int
    milestone_id: int = Field(..., ge=0)
    title: str
    description: str
    target_date: int
    status: MilestoneStatus = MilestoneStatus.PENDING
    completion_date: Optional[int] = None
    evidence: Optional[str] = None
    responsible_party: Optional[str] = None

    model_config = {"from_attributes": True}


class VisionProgress(BaseModel):
    """Aggregate milestone progress for one vision (percent x100)."""

    vision_id: int
    total_milestones: int = 0
    completed_milestones: int = 0
    overall_progress: int = 0
    last_updated: int
    next_review_date: int

    model_config = {"from_attributes": True}


class Comment(BaseModel):
    """Engagement log entry, optionally threaded under a parent comment."""

    vision_id: int
    comment_id: int
    author: str
    content: str
    created_at: int
    parent_comment_id: Optional[int] = None

    model_config = {"from_attributes": True}


class FinalizeOutcome(BaseModel):
    """Result of evaluating quorum and approval at the end of voting."""

    vision_id: int
    status: VisionStatus
    participation_rate: int
    approval_rate: int
    rejection_reason: Optional[RejectionReason] = None


class VotingResults(BaseModel):
    """Read-only snapshot of a vision's voting state."""

    vision_id: int
    status: VisionStatus
    votes_for: int
    votes_against: int
    total_participants: int
    voting_end: Optional[int] = None
    participation_rate: int
    approval_rate: int


class SystemStats(BaseModel):
    total_visions: int
    total_stakeholders: int
    total_comments: int
    governance_enabled: bool
