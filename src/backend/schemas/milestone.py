"""
Milestone-related Pydantic schemas (API layer).
"""

from typing import Optional

from pydantic import BaseModel


class MilestoneCreate(BaseModel):
    """Schema for attaching a milestone to an approved vision."""

    milestone_id: int
    title: str
    description: str
    target_date: int
    responsible_party: Optional[str] = None


class MilestoneStatusUpdate(BaseModel):
    """
    Schema for a milestone status change.

    ``status`` is validated by the engine so unknown values surface as
    invalid_status errors. ``evidence`` replaces any previous evidence,
    including with null.
    """

    status: str
    evidence: Optional[str] = None
