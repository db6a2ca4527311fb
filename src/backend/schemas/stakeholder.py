"""
Stakeholder-related Pydantic schemas (API layer).
"""

from pydantic import BaseModel, Field


class StakeholderRegister(BaseModel):
    """Schema for registering the calling principal as a stakeholder."""

    role: str = Field(..., description="One of: resident, business, organization, official")
