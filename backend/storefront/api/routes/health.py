from fastapi import APIRouter, Depends

from storefront.api.deps import get_result_cache
from storefront.core.config import settings
from storefront.services.catalog.result_cache import ResultCache

router = APIRouter()

@router.get("/health")
async def health_check(cache: ResultCache = Depends(get_result_cache)):
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.PROJECT_NAME, "cache": cache.stats()}
