"""
API v1 router.

Aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from athletica.api.v1.endpoints import achievements, adaptive, catalog, sessions

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    sessions.router, prefix="/sessions", tags=["Workout sessions"]
)
api_router.include_router(
    adaptive.router, prefix="/adaptive", tags=["Adaptive engine"]
)
api_router.include_router(
    achievements.router, prefix="/achievements", tags=["Achievements"]
)
api_router.include_router(
    catalog.router, prefix="/catalog", tags=["Catalog"]
)
