from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from storefront.services.catalog.facets import FacetStats
from storefront.services.catalog.planner import PageResult
from storefront.services.catalog.store import ProductRecord


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProductCharacteristic(CamelModel):
    name: str
    value: str


class Product(CamelModel):
    id: str
    name: str
    description: str = ""
    category_id: str
    subcategory_id: Optional[str] = None
    manufacturer: str = ""
    characteristics: List[ProductCharacteristic] = []
    images: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: ProductRecord) -> "Product":
        return cls(
            id=record.id,
            name=record.name,
            description=record.description,
            category_id=record.category_id,
            subcategory_id=record.subcategory_id,
            manufacturer=record.manufacturer,
            characteristics=[ProductCharacteristic(name=n, value=v) for n, v in record.characteristics],
            images=list(record.images),
            created_at=None if record.created_at == datetime.min else record.created_at,
            updated_at=None if record.updated_at == datetime.min else record.updated_at,
        )


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool
    total_is_exact: bool = True


class CatalogPageResponse(CamelModel):
    products: List[Product]
    pagination: Pagination

    @classmethod
    def from_page(cls, result: PageResult) -> "CatalogPageResponse":
        return cls(
            products=[Product.from_record(item) for item in result.items],
            pagination=Pagination(
                page=result.page,
                limit=result.page_size,
                total=result.total,
                total_pages=result.total_pages,
                has_next_page=result.has_next,
                has_prev_page=result.has_prev,
                total_is_exact=result.total_is_exact,
            ),
        )


class CatalogStatsResponse(CamelModel):
    manufacturers: List[str]
    characteristics: Dict[str, List[str]]
    available_categories: List[str]
    total_products: int = 0

    @classmethod
    def from_stats(cls, stats: FacetStats) -> "CatalogStatsResponse":
        return cls(
            manufacturers=list(stats.manufacturers),
            characteristics={k: list(v) for k, v in stats.characteristics.items()},
            available_categories=list(stats.available_categories),
            total_products=stats.total_products,
        )
