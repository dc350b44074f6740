from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from storefront.core.config import settings
from storefront.core.logging import get_logger
from storefront.services.catalog.compiler import FilterCompiler, default_compiler
from storefront.services.catalog.predicates import FIELD_CATEGORY_ID, FIELD_CHARACTERISTICS, FIELD_MANUFACTURER
from storefront.services.catalog.selection import FilterSelection
from storefront.services.catalog.store import ProductStore, run_store_call

logger = get_logger(__name__)

UNSPECIFIED_MANUFACTURERS = frozenset({"unspecified", "не указан", "не указано", "-"})


@dataclass(frozen=True)
class FacetStats:
    manufacturers: List[str] = field(default_factory=list)
    characteristics: Dict[str, List[str]] = field(default_factory=dict)
    available_categories: List[str] = field(default_factory=list)
    total_products: int = 0


def clean_manufacturers(values: Iterable[object]) -> List[str]:
    result = set()
    for value in values:
        text = str(value or "").strip()
        if not text or text.lower() in UNSPECIFIED_MANUFACTURERS:
            continue
        result.add(text)
    return sorted(result)


def group_characteristics(pairs: Iterable[object]) -> Dict[str, List[str]]:
    grouped: Dict[str, set] = {}
    for pair in pairs:
        try:
            name, value = pair
        except (TypeError, ValueError):
            continue
        name = str(name or "").strip()
        value = str(value or "").strip()
        if not name or not value:
            continue
        grouped.setdefault(name, set()).add(value)
    return {name: sorted(grouped[name]) for name in sorted(grouped)}


class FacetAggregator:
    """Computes the values each facet can still take.

    Every facet family is evaluated against the selection minus its own
    dimension, so choosing a manufacturer never hides that manufacturer.
    """

    def __init__(
        self,
        store: ProductStore,
        *,
        compiler: Optional[FilterCompiler] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self.store = store
        self.compiler = compiler or default_compiler
        self.timeout_seconds = float(
            timeout_seconds if timeout_seconds is not None else settings.CATALOG_STORE_TIMEOUT_SECONDS
        )

    async def _manufacturers(self, selection: FilterSelection) -> List[str]:
        query = self.compiler.compile(selection.without_manufacturers())
        values = await run_store_call(
            self.store.distinct(FIELD_MANUFACTURER, query.predicate),
            timeout=self.timeout_seconds,
            operation="distinct_manufacturers",
        )
        return clean_manufacturers(values)

    async def _total_products(self, selection: FilterSelection) -> int:
        query = self.compiler.compile(selection)
        return int(
            await run_store_call(
                self.store.count(query.predicate),
                timeout=self.timeout_seconds,
                operation="count_selection",
            )
        )

    async def _characteristics(self, selection: FilterSelection) -> Dict[str, List[str]]:
        query = self.compiler.compile(selection.without_characteristics())
        pairs = await run_store_call(
            self.store.distinct(FIELD_CHARACTERISTICS, query.predicate),
            timeout=self.timeout_seconds,
            operation="distinct_characteristics",
        )
        return group_characteristics(pairs)

    async def _available_categories(self, selection: FilterSelection) -> List[str]:
        # Reachable categories depend on the manufacturer constraint alone.
        query = self.compiler.compile(FilterSelection(manufacturers=selection.manufacturers))
        values = await run_store_call(
            self.store.distinct(FIELD_CATEGORY_ID, query.predicate),
            timeout=self.timeout_seconds,
            operation="distinct_categories",
        )
        return sorted({str(v) for v in values if v})

    async def compute_facets(self, selection: FilterSelection) -> FacetStats:
        results = await asyncio.gather(
            self._manufacturers(selection),
            self._characteristics(selection),
            self._available_categories(selection),
            self._total_products(selection),
            return_exceptions=True,
        )
        for outcome in results:
            if isinstance(outcome, BaseException):
                raise outcome
        manufacturers, characteristics, categories, total = results
        logger.debug(
            "facet stats computed",
            extra={
                "event": "catalog_facets",
                "manufacturers": len(manufacturers),
                "characteristics": len(characteristics),
                "categories": len(categories),
                "total_products": total,
            },
        )
        return FacetStats(
            manufacturers=manufacturers,
            characteristics=characteristics,
            available_categories=categories,
            total_products=total,
        )
