from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, replace
from typing import Any, List, Optional, Set

from storefront.core.logging import get_logger
from storefront.services.catalog.identifiers import SubcategoryNormalizer, default_normalizer
from storefront.services.catalog.predicates import (
    FIELD_CATEGORY_ID,
    FIELD_DESCRIPTION,
    FIELD_MANUFACTURER,
    FIELD_NAME,
    FIELD_SUBCATEGORY_ID,
    Contains,
    HasCharacteristic,
    Predicate,
    all_of,
    any_of,
    one_of,
)
from storefront.services.catalog.selection import FilterSelection

logger = get_logger(__name__)

SEARCH_FIELDS = (FIELD_NAME, FIELD_DESCRIPTION, FIELD_MANUFACTURER)


@dataclass(frozen=True)
class CompiledQuery:
    predicate: Predicate
    selection: FilterSelection


class FilterCompiler:
    """Turns a FilterSelection into a store predicate. Pure; performs no I/O."""

    def __init__(self, normalizer: Optional[SubcategoryNormalizer] = None) -> None:
        self.normalizer = normalizer or default_normalizer

    def canonicalize(self, selection: FilterSelection) -> FilterSelection:
        """Normalize identifiers so equivalent selections compare equal.

        Unresolvable subcategory references are dropped, and a selection that
        covers every subcategory of the chosen category collapses to the
        category alone.
        """
        catalog = self.normalizer.catalog
        category_id = selection.category_id
        if category_id:
            category_id = catalog.normalize_category_id(category_id) or category_id

        canonical: Set[str] = set()
        for reference in selection.subcategory_ids:
            resolved = self.normalizer.normalize_subcategory_reference(category_id, reference)
            if resolved is None:
                logger.debug(
                    "dropping unresolved subcategory from filter",
                    extra={"event": "subcategory_dropped", "category_id": category_id, "reference": reference},
                )
                continue
            canonical.add(resolved)

        if category_id and canonical:
            full_set = self.normalizer.all_canonical_ids(category_id)
            if full_set and canonical == full_set:
                canonical = set()

        return replace(selection, category_id=category_id, subcategory_ids=frozenset(canonical))

    def _subcategory_values(self, category_id: Optional[str], canonical_ids) -> Set[str]:
        values: Set[str] = set()
        for canonical_id in canonical_ids:
            values.add(canonical_id)
            resolution = self.normalizer.resolve(category_id, canonical_id)
            if resolution is not None:
                # Rows written before the id migration still carry the bare id.
                values.add(resolution.subcategory.id)
        return values

    def compile(self, selection: FilterSelection) -> CompiledQuery:
        canonical = self.canonicalize(selection)
        clauses: List[Predicate] = []

        if canonical.category_id:
            clauses.append(one_of(FIELD_CATEGORY_ID, [canonical.category_id]))

        if canonical.subcategory_ids:
            values = self._subcategory_values(canonical.category_id, canonical.subcategory_ids)
            clauses.append(one_of(FIELD_SUBCATEGORY_ID, values))

        if canonical.manufacturers:
            clauses.append(one_of(FIELD_MANUFACTURER, canonical.manufacturers))

        for name, values in canonical.characteristics:
            clauses.append(HasCharacteristic(name=name, values=frozenset(values)))

        for token in canonical.search_tokens():
            clauses.append(any_of(*(Contains(field, token) for field in SEARCH_FIELDS)))

        return CompiledQuery(predicate=all_of(*clauses), selection=canonical)


def selection_cache_key(kind: str, selection: FilterSelection, **extra: Any) -> str:
    """Cache key for an already canonicalized selection plus operation params."""
    payload = dict(extra, selection=selection.to_canonical())
    encoded = json.dumps(payload, ensure_ascii=True, sort_keys=True, separators=(",", ":"))
    return f"catalog:{kind}:" + hashlib.sha256(encoded.encode("utf-8")).hexdigest()


default_compiler = FilterCompiler()
