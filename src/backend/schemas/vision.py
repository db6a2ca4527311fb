"""
Vision-related Pydantic schemas (API layer).

Field limits are enforced by the governance engine, not here, so that API
callers receive the same error kinds as library callers.
"""

from pydantic import BaseModel, Field


class VisionCreate(BaseModel):
    """Schema for proposing a new vision."""

    title: str
    description: str
    category: str
    priority: int = Field(..., description="1 (lowest) to 5 (highest)")
    estimated_offset: int = Field(
        ..., description="Ticks from creation until the estimated completion"
    )


class VisionCreated(BaseModel):
    vision_id: int
