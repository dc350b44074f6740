from fastapi import Request

from storefront.services.catalog.result_cache import ResultCache
from storefront.services.catalog.service import CatalogService
from storefront.services.catalog.store import ProductStore


def get_product_store(request: Request) -> ProductStore:
    return request.app.state.product_store


def get_result_cache(request: Request) -> ResultCache:
    return request.app.state.result_cache


def get_catalog_service(request: Request) -> CatalogService:
    """Dependency building a per-request service over process-wide state."""
    return CatalogService(
        get_product_store(request),
        cache=get_result_cache(request),
    )
