from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from storefront.core.logging import get_logger
from storefront.services.catalog.identifiers import SubcategoryNormalizer, default_normalizer

logger = get_logger(__name__)


@dataclass(frozen=True)
class SubcategoryFix:
    product_id: str
    current: str
    canonical: str


@dataclass
class SubcategoryFixReport:
    fixes: List[SubcategoryFix] = field(default_factory=list)
    already_canonical: int = 0
    skipped: int = 0
    unresolved: List[Tuple[str, str]] = field(default_factory=list)

    def merge(self, other: "SubcategoryFixReport") -> None:
        self.fixes.extend(other.fixes)
        self.already_canonical += other.already_canonical
        self.skipped += other.skipped
        self.unresolved.extend(other.unresolved)


def plan_subcategory_fixes(
    rows: Iterable[Tuple[str, Optional[str], Optional[str]]],
    normalizer: Optional[SubcategoryNormalizer] = None,
) -> SubcategoryFixReport:
    """Work out which ``(product_id, category_id, subcategory_id)`` rows need a
    canonical subcategory id. Rows without both ids are skipped."""
    normalizer = normalizer or default_normalizer
    report = SubcategoryFixReport()
    for product_id, category_id, subcategory_id in rows:
        if not category_id or not subcategory_id:
            report.skipped += 1
            continue
        canonical = normalizer.normalize_subcategory_reference(category_id, subcategory_id)
        if canonical is None:
            report.unresolved.append((str(product_id), str(subcategory_id)))
            logger.warning(
                "no subcategory for product",
                extra={
                    "event": "subcategory_unresolved",
                    "product_id": str(product_id),
                    "category_id": category_id,
                    "subcategory_id": subcategory_id,
                },
            )
            continue
        if canonical == subcategory_id:
            report.already_canonical += 1
            continue
        report.fixes.append(SubcategoryFix(product_id=str(product_id), current=subcategory_id, canonical=canonical))
    return report
