from __future__ import annotations

from typing import Optional

from storefront.core.config import settings
from storefront.services.catalog.compiler import FilterCompiler, default_compiler, selection_cache_key
from storefront.services.catalog.facets import FacetAggregator, FacetStats
from storefront.services.catalog.planner import PageResult, PaginationPlanner
from storefront.services.catalog.result_cache import NullResultCache, ResultCache
from storefront.services.catalog.selection import FilterSelection
from storefront.services.catalog.store import ProductStore

PAGE_CACHE_KIND = "page"
STATS_CACHE_KIND = "stats"


class CatalogService:
    """Compile, then fetch a page or facet stats, memoized by canonical key."""

    def __init__(
        self,
        store: ProductStore,
        *,
        cache: Optional[ResultCache] = None,
        compiler: Optional[FilterCompiler] = None,
        planner: Optional[PaginationPlanner] = None,
        aggregator: Optional[FacetAggregator] = None,
    ) -> None:
        self.store = store
        self.cache = cache if cache is not None else NullResultCache()
        self.compiler = compiler or default_compiler
        self.planner = planner or PaginationPlanner(store)
        self.aggregator = aggregator or FacetAggregator(store, compiler=self.compiler)

    async def get_page(self, selection: FilterSelection, page, page_size) -> PageResult:
        query = self.compiler.compile(selection)
        safe_page, safe_size = self.planner.normalize(page, page_size)
        key = selection_cache_key(PAGE_CACHE_KIND, query.selection, page=safe_page, page_size=safe_size)
        return await self.cache.get_or_compute(
            key,
            float(settings.CATALOG_PAGE_CACHE_TTL_SECONDS),
            lambda: self.planner.fetch_page(query, safe_page, safe_size),
        )

    async def get_stats(self, selection: FilterSelection) -> FacetStats:
        canonical = self.compiler.canonicalize(selection)
        key = selection_cache_key(STATS_CACHE_KIND, canonical)
        return await self.cache.get_or_compute(
            key,
            float(settings.CATALOG_STATS_CACHE_TTL_SECONDS),
            lambda: self.aggregator.compute_facets(canonical),
        )
