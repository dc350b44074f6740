"""Subcategory reference normalization.

Historical product data references subcategories as bare ids (``"1-2"``),
composite ``category-subcategory`` strings built from latin or legacy
Cyrillic-derived slugs, or bare slugs. Every form is resolved here, against the
static catalog only, to the canonical ``"{categorySlug}-{subcategorySlug}"`` id.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from storefront.core.logging import get_logger
from storefront.services.catalog.categories import Category, CategoryCatalog, Subcategory, default_catalog

logger = get_logger(__name__)

_FUZZY_STRIP_RE = re.compile(r"[\s\-_]+")


def _fuzzy_key(value: str) -> str:
    text = str(value or "").strip().lower().replace("ё", "е")
    return _FUZZY_STRIP_RE.sub("", text)


@dataclass(frozen=True)
class SubcategoryResolution:
    category: Category
    subcategory: Subcategory
    strategy: str

    @property
    def canonical_id(self) -> str:
        return self.category.canonical_subcategory_id(self.subcategory)


class ResolutionStrategy:
    """One rule in the resolution chain; returns None when it does not apply."""

    name = "base"

    def resolve(self, catalog: CategoryCatalog, category: Category, raw: str) -> Optional[Subcategory]:
        raise NotImplementedError


def _match_slug(category: Category, slug: str) -> Optional[Subcategory]:
    needle = slug.strip().lower()
    if not needle:
        return None
    for sub in category.subcategories:
        if sub.slug.lower() == needle:
            return sub
    for sub in category.subcategories:
        if needle in (legacy.lower() for legacy in sub.legacy_slugs):
            return sub
    return None


class ExactIdStrategy(ResolutionStrategy):
    name = "exact_id"

    def resolve(self, catalog, category, raw):
        for sub in category.subcategories:
            if raw == sub.id or raw == category.canonical_subcategory_id(sub):
                return sub
        return None


class PrefixedSlugStrategy(ResolutionStrategy):
    name = "prefixed_slug"

    def resolve(self, catalog, category, raw):
        lowered = raw.lower()
        for prefix in catalog.category_prefixes(category):
            head = f"{prefix}-"
            if lowered.startswith(head) and len(lowered) > len(head):
                found = _match_slug(category, raw[len(head):])
                if found is not None:
                    return found
        return None


class BareSlugStrategy(ResolutionStrategy):
    name = "bare_slug"

    def resolve(self, catalog, category, raw):
        return _match_slug(category, raw)


class FuzzyNameStrategy(ResolutionStrategy):
    name = "fuzzy_name"

    def resolve(self, catalog, category, raw):
        key = _fuzzy_key(raw)
        if not key:
            return None
        for sub in category.subcategories:
            if key == _fuzzy_key(sub.name) or key == _fuzzy_key(sub.slug):
                return sub
        return None


DEFAULT_STRATEGIES: Sequence[ResolutionStrategy] = (
    ExactIdStrategy(),
    PrefixedSlugStrategy(),
    BareSlugStrategy(),
    FuzzyNameStrategy(),
)


class SubcategoryNormalizer:
    def __init__(
        self,
        catalog: Optional[CategoryCatalog] = None,
        strategies: Optional[Iterable[ResolutionStrategy]] = None,
    ) -> None:
        self.catalog = catalog or default_catalog
        self.strategies: List[ResolutionStrategy] = list(strategies or DEFAULT_STRATEGIES)

    def _candidate_categories(self, category_id: Optional[str]) -> List[Category]:
        if category_id:
            normalized = self.catalog.normalize_category_id(category_id)
            category = self.catalog.get(normalized)
            return [category] if category else []
        return list(self.catalog.categories)

    def resolve(self, category_id: Optional[str], raw_reference: Optional[str]) -> Optional[SubcategoryResolution]:
        raw = str(raw_reference or "").strip()
        if not raw:
            return None
        categories = self._candidate_categories(category_id)
        # Strategy order outranks category order so an exact id in a later
        # category wins over a fuzzy match in an earlier one.
        for strategy in self.strategies:
            for category in categories:
                found = strategy.resolve(self.catalog, category, raw)
                if found is not None:
                    return SubcategoryResolution(category=category, subcategory=found, strategy=strategy.name)
        logger.debug(
            "subcategory reference not resolved",
            extra={"event": "subcategory_not_found", "category_id": category_id, "reference": raw},
        )
        return None

    def normalize_subcategory_reference(
        self,
        category_id: Optional[str],
        raw_reference: Optional[str],
    ) -> Optional[str]:
        """Return the canonical composite id, or None when nothing matches."""
        resolution = self.resolve(category_id, raw_reference)
        return resolution.canonical_id if resolution else None

    def all_canonical_ids(self, category_id: Optional[str]) -> frozenset:
        category = self.catalog.get(self.catalog.normalize_category_id(category_id))
        if category is None:
            return frozenset()
        return category.all_canonical_subcategory_ids()


default_normalizer = SubcategoryNormalizer()
