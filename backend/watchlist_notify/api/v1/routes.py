from fastapi import APIRouter

from watchlist_notify.api.v1.endpoints.availability import router as availability_router
from watchlist_notify.api.v1.endpoints.health import router as health_router
from watchlist_notify.api.v1.endpoints.search import router as search_router

router = APIRouter()
router.include_router(health_router, tags=["meta"])
router.include_router(
    availability_router, prefix="/availability", tags=["availability"]
)
router.include_router(search_router, tags=["search"])
