from fastapi import APIRouter
from .sprints import router as sprints_router
from .analytics import router as analytics_router
from .availability import router as availability_router

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(sprints_router, prefix="/sprints", tags=["sprints"])
api_router.include_router(analytics_router, prefix="/analytics", tags=["analytics"])
api_router.include_router(availability_router, prefix="/availability", tags=["availability"])
