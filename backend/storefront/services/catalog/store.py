from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

from storefront.core.logging import get_logger
from storefront.services.catalog.errors import CatalogStoreError, StoreTimeoutError, StoreUnavailableError
from storefront.services.catalog.predicates import (
    FIELD_CHARACTERISTICS,
    SCALAR_FIELDS,
    And,
    Contains,
    Eq,
    HasCharacteristic,
    In,
    MatchAll,
    Or,
    Predicate,
)

logger = get_logger(__name__)

T = TypeVar("T")

DISTINCT_FIELDS = frozenset({"manufacturer", "category_id", "subcategory_id", FIELD_CHARACTERISTICS})


@dataclass(frozen=True)
class ProductRecord:
    id: str
    name: str
    description: str = ""
    category_id: str = ""
    subcategory_id: Optional[str] = None
    manufacturer: str = ""
    characteristics: Tuple[Tuple[str, str], ...] = ()
    images: Tuple[str, ...] = ()
    created_at: datetime = datetime.min
    updated_at: datetime = datetime.min

    @property
    def sort_key(self) -> Tuple[datetime, str]:
        return (self.created_at, self.id)


class ProductStore:
    """Read-only product collection.

    Adapters accept any predicate built from ``predicates``; results of
    ``find`` are ordered by creation time, then id.
    """

    async def find(self, predicate: Predicate, *, skip: int = 0, limit: Optional[int] = None) -> List[ProductRecord]:
        raise NotImplementedError

    async def count(self, predicate: Predicate) -> int:
        raise NotImplementedError

    async def distinct(self, field: str, predicate: Predicate) -> List[Any]:
        raise NotImplementedError


async def run_store_call(awaitable: Awaitable[T], *, timeout: float, operation: str) -> T:
    """Await a store call under a wall-clock budget, translating failures."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning(
            "product store call timed out",
            extra={"event": "store_timeout", "operation": operation, "timeout": timeout},
        )
        raise StoreTimeoutError(f"{operation} exceeded {timeout:.2f}s") from exc
    except CatalogStoreError:
        raise
    except Exception as exc:
        logger.error(
            "product store call failed",
            extra={"event": "store_error", "operation": operation, "error": str(exc)},
        )
        raise StoreUnavailableError(f"{operation} failed: {exc}") from exc


def matches(product: ProductRecord, predicate: Predicate) -> bool:
    if isinstance(predicate, MatchAll):
        return True
    if isinstance(predicate, Eq):
        return _scalar(product, predicate.field) == predicate.value
    if isinstance(predicate, In):
        return _scalar(product, predicate.field) in predicate.values
    if isinstance(predicate, Contains):
        return predicate.needle.lower() in (_scalar(product, predicate.field) or "").lower()
    if isinstance(predicate, HasCharacteristic):
        return any(name == predicate.name and value in predicate.values for name, value in product.characteristics)
    if isinstance(predicate, And):
        return all(matches(product, clause) for clause in predicate.clauses)
    if isinstance(predicate, Or):
        return any(matches(product, clause) for clause in predicate.clauses)
    raise TypeError(f"unsupported predicate: {predicate!r}")


def _scalar(product: ProductRecord, field_name: str) -> Optional[str]:
    if field_name not in SCALAR_FIELDS:
        raise ValueError(f"unsupported field: {field_name}")
    return getattr(product, field_name)


def _parse_datetime(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw
    text = str(raw or "").strip()
    if not text:
        return datetime.min
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return datetime.min
    # Compare naive UTC values, as the SQL columns store them.
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def product_from_document(doc: Mapping[str, Any]) -> ProductRecord:
    """Build a ProductRecord from a camelCase catalog document."""
    characteristics: List[Tuple[str, str]] = []
    for item in doc.get("characteristics") or []:
        if not isinstance(item, Mapping):
            continue
        name = str(item.get("name") or "").strip()
        value = str(item.get("value") or "").strip()
        if name:
            characteristics.append((name, value))
    subcategory_id = doc.get("subcategoryId", doc.get("subcategory_id"))
    return ProductRecord(
        id=str(doc.get("id")),
        name=str(doc.get("name") or ""),
        description=str(doc.get("description") or ""),
        category_id=str(doc.get("categoryId", doc.get("category_id")) or ""),
        subcategory_id=str(subcategory_id) if subcategory_id else None,
        manufacturer=str(doc.get("manufacturer") or ""),
        characteristics=tuple(characteristics),
        images=tuple(str(url) for url in (doc.get("images") or []) if url),
        created_at=_parse_datetime(doc.get("createdAt", doc.get("created_at"))),
        updated_at=_parse_datetime(doc.get("updatedAt", doc.get("updated_at"))),
    )


class InMemoryProductStore(ProductStore):
    """Product store over an in-process list, e.g. a JSON catalog snapshot."""

    def __init__(self, products: Iterable[ProductRecord] = ()) -> None:
        self._products: List[ProductRecord] = sorted(products, key=lambda p: p.sort_key)

    @classmethod
    def from_documents(cls, documents: Iterable[Mapping[str, Any]]) -> "InMemoryProductStore":
        return cls(product_from_document(doc) for doc in documents if doc and doc.get("id"))

    @classmethod
    def from_json_file(cls, path: str) -> "InMemoryProductStore":
        file_path = Path(path)
        if not file_path.exists():
            logger.warning("catalog snapshot not found", extra={"event": "catalog_missing", "path": str(file_path)})
            return cls()
        with file_path.open("r", encoding="utf-8") as f:
            documents = json.load(f)
        store = cls.from_documents(documents if isinstance(documents, list) else [])
        logger.info("catalog snapshot loaded", extra={"event": "catalog_loaded", "products": len(store)})
        return store

    def __len__(self) -> int:
        return len(self._products)

    def _filter(self, predicate: Predicate) -> List[ProductRecord]:
        return [p for p in self._products if matches(p, predicate)]

    async def _run_scan(self, fn, *args):
        # Scans run off the event loop.
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)

    def _find_sync(self, predicate: Predicate, skip: int, limit: Optional[int]) -> List[ProductRecord]:
        rows = self._filter(predicate)
        start = max(0, int(skip))
        end = None if limit is None else start + max(0, int(limit))
        return rows[start:end]

    async def find(self, predicate, *, skip=0, limit=None):
        return await self._run_scan(self._find_sync, predicate, skip, limit)

    async def count(self, predicate):
        return await self._run_scan(lambda: len(self._filter(predicate)))

    async def distinct(self, field, predicate):
        if field not in DISTINCT_FIELDS:
            raise ValueError(f"unsupported distinct field: {field}")
        return await self._run_scan(self._distinct_sync, field, predicate)

    def _distinct_sync(self, field: str, predicate: Predicate) -> List[Any]:
        seen: Dict[Any, None] = {}
        for product in self._filter(predicate):
            if field == FIELD_CHARACTERISTICS:
                for pair in product.characteristics:
                    seen.setdefault(pair, None)
            else:
                value = getattr(product, field)
                if value is not None:
                    seen.setdefault(value, None)
        return list(seen)
