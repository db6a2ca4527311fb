"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.comments import router as comments_router
from api.v1.milestones import router as milestones_router
from api.v1.stakeholders import router as stakeholders_router
from api.v1.stats import router as stats_router
from api.v1.visions import router as visions_router
from api.v1.votes import router as votes_router

router = APIRouter()

router.include_router(stakeholders_router, prefix="/stakeholders", tags=["Stakeholders"])
router.include_router(visions_router, prefix="/visions", tags=["Visions"])
router.include_router(milestones_router, prefix="/visions", tags=["Milestones"])
router.include_router(comments_router, prefix="/visions", tags=["Comments"])
router.include_router(votes_router, prefix="/votes", tags=["Votes"])
router.include_router(stats_router, prefix="/stats", tags=["Statistics"])
