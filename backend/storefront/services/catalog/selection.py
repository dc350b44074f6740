from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from storefront.core.logging import get_logger

logger = get_logger(__name__)

MIN_SEARCH_TOKEN_LENGTH = 2


@dataclass(frozen=True)
class FilterSelection:
    """Typed, immutable facet selection. Empty dimensions mean "no constraint"."""

    category_id: Optional[str] = None
    subcategory_ids: FrozenSet[str] = frozenset()
    manufacturers: FrozenSet[str] = frozenset()
    characteristics: Tuple[Tuple[str, FrozenSet[str]], ...] = ()
    search_text: Optional[str] = None

    @classmethod
    def build(
        cls,
        *,
        category_id: Optional[str] = None,
        subcategory_ids: Iterable[str] = (),
        manufacturers: Iterable[str] = (),
        characteristics: Optional[Mapping[str, Iterable[str]]] = None,
        search_text: Optional[str] = None,
    ) -> "FilterSelection":
        return cls(
            category_id=(str(category_id).strip() or None) if category_id is not None else None,
            subcategory_ids=frozenset(_clean_values(subcategory_ids)),
            manufacturers=frozenset(_clean_values(manufacturers)),
            characteristics=_freeze_characteristics(characteristics or {}),
            search_text=(str(search_text).strip() or None) if search_text is not None else None,
        )

    @property
    def characteristics_map(self) -> Dict[str, FrozenSet[str]]:
        return dict(self.characteristics)

    def without_manufacturers(self) -> "FilterSelection":
        return replace(self, manufacturers=frozenset())

    def without_characteristics(self) -> "FilterSelection":
        return replace(self, characteristics=())

    def search_tokens(self) -> List[str]:
        return tokenize_search(self.search_text)

    def to_canonical(self) -> Dict[str, Any]:
        """Dimension-sorted serialization used for cache keys."""
        return {
            "category_id": self.category_id or "",
            "subcategory_ids": sorted(self.subcategory_ids),
            "manufacturers": sorted(self.manufacturers),
            "characteristics": [[name, sorted(values)] for name, values in self.characteristics],
            "search": self.search_tokens(),
        }


def _clean_values(values: Optional[Iterable[Any]]) -> List[str]:
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    cleaned: List[str] = []
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text:
            cleaned.append(text)
    return cleaned


def _freeze_characteristics(raw: Mapping[str, Iterable[str]]) -> Tuple[Tuple[str, FrozenSet[str]], ...]:
    frozen: Dict[str, FrozenSet[str]] = {}
    for name, values in raw.items():
        key = str(name or "").strip()
        cleaned = frozenset(_clean_values(values))
        if not key or not cleaned:
            continue
        frozen[key] = frozen.get(key, frozenset()) | cleaned
    return tuple(sorted(frozen.items()))


def tokenize_search(search_text: Optional[str]) -> List[str]:
    """Lower-cased whitespace tokens, short tokens dropped, sorted and unique."""
    text = str(search_text or "").strip().lower()
    if not text:
        return []
    tokens = {token for token in text.split() if len(token) >= MIN_SEARCH_TOKEN_LENGTH}
    return sorted(tokens)


def split_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip() for part in str(raw).split(",") if part.strip()]


def parse_characteristics(raw: Optional[str]) -> Dict[str, List[str]]:
    """Parse the ``characteristics`` JSON parameter.

    Accepts ``{"name": ["v1", "v2"]}``; a bare string value counts as a
    one-element list. Anything else degrades to "no characteristic filter".
    """
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.info(
            "ignoring malformed characteristics filter",
            extra={"event": "characteristics_parse_failed", "error": str(exc)},
        )
        return {}
    if not isinstance(parsed, dict):
        return {}
    result: Dict[str, List[str]] = {}
    for name, values in parsed.items():
        if isinstance(values, str):
            values = [values]
        if not isinstance(values, list):
            continue
        cleaned = [str(v).strip() for v in values if isinstance(v, (str, int, float)) and str(v).strip()]
        if cleaned:
            result[str(name)] = cleaned
    return result


def parse_filter_selection(
    *,
    category_id: Optional[str] = None,
    subcategories: Optional[str] = None,
    subcategory_id: Optional[str] = None,
    manufacturers: Optional[str] = None,
    characteristics: Optional[str] = None,
    search: Optional[str] = None,
) -> FilterSelection:
    """Build a FilterSelection from raw query-string values."""
    subcategory_refs = split_csv(subcategories)
    if not subcategory_refs and subcategory_id:
        subcategory_refs = [subcategory_id]
    return FilterSelection.build(
        category_id=category_id,
        subcategory_ids=subcategory_refs,
        manufacturers=split_csv(manufacturers),
        characteristics=parse_characteristics(characteristics),
        search_text=search,
    )
