"""
Stakeholder registration endpoints.
"""

from fastapi import APIRouter, HTTPException, status

from api.deps import CurrentPrincipal, Engine
from schemas.governance import Stakeholder
from schemas.stakeholder import StakeholderRegister

router = APIRouter()


@router.post("", response_model=Stakeholder, status_code=status.HTTP_201_CREATED)
async def register_stakeholder(
    data: StakeholderRegister,
    principal: CurrentPrincipal,
    engine: Engine,
) -> Stakeholder:
    """Register the calling principal. Each identity can register once."""
    return await engine.register_stakeholder(principal, data.role)


@router.get("/{identity}", response_model=Stakeholder)
async def get_stakeholder(identity: str, engine: Engine) -> Stakeholder:
    stakeholder = await engine.get_stakeholder(identity)
    if stakeholder is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Stakeholder not found")
    return stakeholder
