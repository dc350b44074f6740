from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Optional

from storefront.core.config import settings
from storefront.core.logging import get_logger
from storefront.services.catalog.compiler import CompiledQuery
from storefront.services.catalog.store import ProductRecord, ProductStore, run_store_call
from storefront.utils.pagination import clamp_page, clamp_page_size, compute_total_pages, page_offset

logger = get_logger(__name__)

UNKNOWN_TOTAL = 0


@dataclass(frozen=True)
class PageResult:
    items: List[ProductRecord]
    page: int
    page_size: int
    total: int
    total_is_exact: bool
    has_next: bool

    @property
    def total_pages(self) -> int:
        if not self.total_is_exact:
            return 0
        return compute_total_pages(self.total, self.page_size)

    @property
    def has_prev(self) -> bool:
        return self.page > 1


class PaginationPlanner:
    """Fetches one stably sorted page and decides how much counting it can afford.

    An exact count runs only inside the first ``exact_count_max_page`` pages.
    Deeper pages report an unknown total and infer ``has_next`` from whether
    the fetched page came back full.
    """

    def __init__(
        self,
        store: ProductStore,
        *,
        exact_count_max_page: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        max_page_size: Optional[int] = None,
        default_page_size: Optional[int] = None,
    ) -> None:
        self.store = store
        self.exact_count_max_page = int(
            exact_count_max_page if exact_count_max_page is not None else settings.CATALOG_EXACT_COUNT_MAX_PAGE
        )
        self.timeout_seconds = float(
            timeout_seconds if timeout_seconds is not None else settings.CATALOG_STORE_TIMEOUT_SECONDS
        )
        self.max_page_size = int(max_page_size or settings.CATALOG_MAX_PAGE_SIZE)
        self.default_page_size = int(default_page_size or settings.CATALOG_DEFAULT_PAGE_SIZE)

    def normalize(self, page, page_size):
        page_size = clamp_page_size(page_size, default=self.default_page_size, maximum=self.max_page_size)
        return clamp_page(page, page_size), page_size

    async def fetch_page(self, query: CompiledQuery, page: int, page_size: int) -> PageResult:
        started = time.perf_counter()
        page, page_size = self.normalize(page, page_size)
        offset = page_offset(page, page_size)

        if page <= self.exact_count_max_page:
            total = await run_store_call(
                self.store.count(query.predicate), timeout=self.timeout_seconds, operation="count"
            )
            items: List[ProductRecord] = []
            if offset < total:
                items = await run_store_call(
                    self.store.find(query.predicate, skip=offset, limit=page_size),
                    timeout=self.timeout_seconds,
                    operation="find",
                )
            result = PageResult(
                items=list(items)[:page_size],
                page=page,
                page_size=page_size,
                total=int(total),
                total_is_exact=True,
                has_next=page < compute_total_pages(total, page_size),
            )
        else:
            items = await run_store_call(
                self.store.find(query.predicate, skip=offset, limit=page_size),
                timeout=self.timeout_seconds,
                operation="find",
            )
            items = list(items)[:page_size]
            result = PageResult(
                items=items,
                page=page,
                page_size=page_size,
                total=UNKNOWN_TOTAL,
                total_is_exact=False,
                has_next=len(items) == page_size,
            )

        elapsed_ms = (time.perf_counter() - started) * 1000
        if elapsed_ms > float(getattr(settings, "CATALOG_SLOW_QUERY_MS", 1000)):
            logger.warning(
                "slow catalog page",
                extra={
                    "event": "catalog_slow_page",
                    "page": page,
                    "page_size": page_size,
                    "total": result.total,
                    "returned": len(result.items),
                    "elapsed_ms": round(elapsed_ms, 2),
                },
            )
        return result
