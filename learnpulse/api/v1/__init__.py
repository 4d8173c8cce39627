"""
API v1 routes.
"""

from fastapi import APIRouter

from learnpulse.api.v1 import analytics, gamification

router = APIRouter()

router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
router.include_router(gamification.router, prefix="/gamification", tags=["Gamification"])
