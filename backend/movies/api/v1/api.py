"""
API v1 Router - Main API routing configuration
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from movies.api.v1.endpoints import movies, ratings
from movies.core.config import settings
from movies.core.database import check_database_health
from movies.core.logging import get_logger

logger = get_logger(__name__)

# Create main API router
api_router = APIRouter()

# ==========================================
# HEALTH AND STATUS ENDPOINTS
# ==========================================

@api_router.get("/health")
async def health_check():
    """API health check endpoint"""

    database = await check_database_health()
    healthy = database["status"] == "healthy"

    if not healthy:
        logger.warning("Health check degraded", database=database)

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "services": {"database": database},
        }
    )

# ==========================================
# ENDPOINT ROUTERS
# ==========================================

api_router.include_router(movies.router, prefix="/movies", tags=["movies"])
api_router.include_router(ratings.router, tags=["ratings"])
