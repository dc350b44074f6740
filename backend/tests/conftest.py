from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List, Optional

import pytest

from storefront.services.catalog.store import InMemoryProductStore, ProductRecord

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


def make_product(
    product_id: str,
    *,
    name: str = "Product",
    description: str = "",
    category_id: str = "1",
    subcategory_id: Optional[str] = None,
    manufacturer: str = "",
    characteristics: Optional[Dict[str, str]] = None,
    minutes: int = 0,
) -> ProductRecord:
    return ProductRecord(
        id=product_id,
        name=name,
        description=description,
        category_id=category_id,
        subcategory_id=subcategory_id,
        manufacturer=manufacturer,
        characteristics=tuple((characteristics or {}).items()),
        created_at=BASE_TIME + timedelta(minutes=minutes),
        updated_at=BASE_TIME + timedelta(minutes=minutes),
    )


class CountingStore(InMemoryProductStore):
    """In-memory store that records how often each operation runs."""

    def __init__(self, products=()):
        super().__init__(products)
        self.calls: Dict[str, int] = {"find": 0, "count": 0, "distinct": 0}

    async def find(self, predicate, *, skip=0, limit=None):
        self.calls["find"] += 1
        return await super().find(predicate, skip=skip, limit=limit)

    async def count(self, predicate):
        self.calls["count"] += 1
        return await super().count(predicate)

    async def distinct(self, field, predicate):
        self.calls["distinct"] += 1
        return await super().distinct(field, predicate)


@pytest.fixture
def sample_products() -> List[ProductRecord]:
    return [
        make_product("p1", name="Шкаф холодильный Polair", category_id="1", subcategory_id="1-2",
                     manufacturer="Polair", characteristics={"Power": "1800W", "Color": "White"}, minutes=1),
        make_product("p2", name="Ларь морозильный", category_id="1", subcategory_id="1-2",
                     manufacturer="Acme", characteristics={"Power": "2000W"}, minutes=2),
        make_product("p3", name="Витрина холодильная", category_id="1",
                     subcategory_id="profoborudovanie-holodilnoe-oborudovanie",
                     manufacturer="Acme", characteristics={"Color": "Black"}, minutes=3),
        make_product("p4", name="Мясорубка", category_id="1", subcategory_id="1-3",
                     manufacturer="Fimar", characteristics={"Power": "1800W"}, minutes=4),
        make_product("p5", name="Слайсер", category_id="1", subcategory_id="1-3",
                     manufacturer="unspecified", minutes=5),
        make_product("p6", name="Кофемашина Saeco X", description="Автоматическая машина для эспрессо",
                     category_id="2", subcategory_id="kofevarki-i-kofemashiny-kofemashiny",
                     manufacturer="Saeco", minutes=6),
        make_product("p7", name="Кофемолка", category_id="2", subcategory_id="2-3",
                     manufacturer="Acme", minutes=7),
    ]


@pytest.fixture
def store(sample_products) -> CountingStore:
    return CountingStore(sample_products)
