from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import and_, false, func, or_, select, true
from sqlalchemy.ext.asyncio import async_sessionmaker

from storefront.models.product import Product, ProductCharacteristic
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
from storefront.services.catalog.store import DISTINCT_FIELDS, ProductRecord, ProductStore


def _column(field_name: str):
    if field_name not in SCALAR_FIELDS:
        raise ValueError(f"unsupported field: {field_name}")
    return getattr(Product, field_name)


def build_condition(predicate: Predicate):
    """Translate a predicate tree into a SQLAlchemy boolean expression."""
    if isinstance(predicate, MatchAll):
        return true()
    if isinstance(predicate, Eq):
        return _column(predicate.field) == predicate.value
    if isinstance(predicate, In):
        if not predicate.values:
            return false()
        return _column(predicate.field).in_(sorted(predicate.values))
    if isinstance(predicate, Contains):
        text_expr = func.lower(func.coalesce(_column(predicate.field), ""))
        return text_expr.contains(predicate.needle.lower(), autoescape=True)
    if isinstance(predicate, HasCharacteristic):
        subq = select(ProductCharacteristic.product_id).where(
            and_(
                ProductCharacteristic.name == predicate.name,
                ProductCharacteristic.value.in_(sorted(predicate.values)),
            )
        )
        return Product.id.in_(subq)
    if isinstance(predicate, And):
        return and_(*[build_condition(clause) for clause in predicate.clauses])
    if isinstance(predicate, Or):
        return or_(*[build_condition(clause) for clause in predicate.clauses])
    raise TypeError(f"unsupported predicate: {predicate!r}")


def _to_record(product: Product) -> ProductRecord:
    return ProductRecord(
        id=product.id,
        name=product.name or "",
        description=product.description or "",
        category_id=product.category_id or "",
        subcategory_id=product.subcategory_id,
        manufacturer=product.manufacturer or "",
        characteristics=tuple((c.name, c.value) for c in product.characteristics or []),
        images=tuple(product.images or []),
        created_at=product.created_at,
        updated_at=product.updated_at or product.created_at,
    )


class SqlProductStore(ProductStore):
    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def find(self, predicate, *, skip=0, limit=None) -> List[ProductRecord]:
        stmt = (
            select(Product)
            .where(build_condition(predicate))
            .order_by(Product.created_at.asc(), Product.id.asc())
            .offset(max(0, int(skip)))
        )
        if limit is not None:
            stmt = stmt.limit(max(0, int(limit)))
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            return [_to_record(p) for p in result.scalars().all()]

    async def count(self, predicate) -> int:
        stmt = select(func.count()).select_from(Product).where(build_condition(predicate))
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            return int(result.scalar() or 0)

    async def distinct(self, field, predicate) -> List[Any]:
        if field not in DISTINCT_FIELDS:
            raise ValueError(f"unsupported distinct field: {field}")
        condition = build_condition(predicate)
        if field == FIELD_CHARACTERISTICS:
            stmt = (
                select(ProductCharacteristic.name, ProductCharacteristic.value)
                .where(ProductCharacteristic.product_id.in_(select(Product.id).where(condition)))
                .distinct()
            )
            async with self._session_factory() as db:
                rows = (await db.execute(stmt)).all()
            return [(row[0], row[1]) for row in rows]
        column = _column(field)
        stmt = select(column).where(condition).where(column.isnot(None)).distinct()
        async with self._session_factory() as db:
            rows = (await db.execute(stmt)).all()
        return [row[0] for row in rows]


def build_sql_store(session_factory: Optional[async_sessionmaker] = None) -> SqlProductStore:
    if session_factory is None:
        from storefront.db.session import AsyncSessionLocal

        session_factory = AsyncSessionLocal
    return SqlProductStore(session_factory)
