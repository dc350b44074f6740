from typing import Optional

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_catalog_service
from storefront.core.config import settings
from storefront.core.exceptions import CatalogQueryException
from storefront.core.logging import get_logger
from storefront.schemas.catalog import CatalogPageResponse, CatalogStatsResponse
from storefront.services.catalog.errors import CatalogStoreError
from storefront.services.catalog.selection import parse_filter_selection
from storefront.services.catalog.service import CatalogService
from storefront.utils.pagination import parse_int

router = APIRouter()
logger = get_logger(__name__)


@router.get("", response_model=CatalogPageResponse)
async def list_catalog(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    category_id: Optional[str] = Query(None, alias="categoryId"),
    subcategories: Optional[str] = None,
    subcategory_id: Optional[str] = Query(None, alias="subcategoryId"),
    manufacturers: Optional[str] = None,
    characteristics: Optional[str] = None,
    search: Optional[str] = None,
    service: CatalogService = Depends(get_catalog_service),
):
    """Filtered, paginated product listing.

    Malformed parameters are clamped or ignored. Store failures surface as
    503 with a machine-readable ``kind`` so callers can tell them apart from
    an empty result.
    """
    selection = parse_filter_selection(
        category_id=category_id,
        subcategories=subcategories,
        subcategory_id=subcategory_id,
        manufacturers=manufacturers,
        characteristics=characteristics,
        search=search,
    )
    try:
        result = await service.get_page(
            selection,
            parse_int(page, 1),
            parse_int(limit, settings.CATALOG_DEFAULT_PAGE_SIZE),
        )
    except CatalogStoreError as exc:
        logger.error("catalog page failed", extra={"event": "catalog_page_failed", "kind": exc.kind})
        raise CatalogQueryException(kind=exc.kind, message=str(exc)) from exc
    return CatalogPageResponse.from_page(result)


@router.get("/stats", response_model=CatalogStatsResponse)
async def catalog_stats(
    category_id: Optional[str] = Query(None, alias="categoryId"),
    subcategories: Optional[str] = None,
    subcategory_id: Optional[str] = Query(None, alias="subcategoryId"),
    manufacturers: Optional[str] = None,
    characteristics: Optional[str] = None,
    search: Optional[str] = None,
    service: CatalogService = Depends(get_catalog_service),
):
    selection = parse_filter_selection(
        category_id=category_id,
        subcategories=subcategories,
        subcategory_id=subcategory_id,
        manufacturers=manufacturers,
        characteristics=characteristics,
        search=search,
    )
    try:
        stats = await service.get_stats(selection)
    except CatalogStoreError as exc:
        logger.error("catalog stats failed", extra={"event": "catalog_stats_failed", "kind": exc.kind})
        raise CatalogQueryException(kind=exc.kind, message=str(exc)) from exc
    return CatalogStatsResponse.from_stats(stats)
