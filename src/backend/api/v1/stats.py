"""
Governance statistics endpoint.
"""

from fastapi import APIRouter

from api.deps import Engine
from schemas.governance import SystemStats

router = APIRouter()


@router.get("", response_model=SystemStats)
async def get_system_stats(engine: Engine) -> SystemStats:
    """Totals of visions, stakeholders and comments, plus the governance switch."""
    return await engine.get_system_stats()
