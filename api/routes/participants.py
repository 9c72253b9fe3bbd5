"""
Participant profile endpoints.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core.analytics import AnalyticsRepository
from utils.logger import get_logger
from .deps import get_analytics_repository

logger = get_logger(__name__)
router = APIRouter(tags=["participants"])


@router.get("/public-profiles/count")
async def get_public_profiles_count(repository: AnalyticsRepository = Depends(get_analytics_repository)):
    """Get the number of registered participants."""
    try:
        count = await repository.count_users()
    except Exception as e:
        logger.error(f"Error fetching user count: {e}")
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})
    return {"count": count}
