from __future__ import annotations

import pytest

pytest.importorskip("sqlalchemy")

from sqlalchemy.dialects import postgresql

from storefront.services.catalog.compiler import FilterCompiler
from storefront.services.catalog.predicates import In, MatchAll
from storefront.services.catalog.selection import FilterSelection
from storefront.services.catalog.sql_store import build_condition


def _sql(predicate) -> str:
    condition = build_condition(predicate)
    return str(condition.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))


def test_match_all_is_true() -> None:
    assert _sql(MatchAll()).lower() == "true"


def test_empty_in_matches_nothing() -> None:
    assert _sql(In("manufacturer", frozenset())).lower() == "false"


def test_full_selection_translates_every_dimension() -> None:
    query = FilterCompiler().compile(
        FilterSelection.build(
            category_id="1",
            subcategory_ids=["1-2"],
            manufacturers=["Acme", "Polair"],
            characteristics={"Power": ["1800W"]},
            search_text="шкаф",
        )
    )

    sql = _sql(query.predicate)

    assert "products.category_id = '1'" in sql
    assert "products.subcategory_id IN ('1-2', 'profoborudovanie-holodilnoe-oborudovanie')" in sql
    assert "products.manufacturer IN ('Acme', 'Polair')" in sql
    assert "product_characteristics.name = 'Power'" in sql
    assert "product_characteristics.value IN ('1800W')" in sql
    assert "lower(coalesce(products.name, ''))" in sql
    assert "шкаф" in sql


def test_unknown_field_is_rejected() -> None:
    with pytest.raises(ValueError):
        build_condition(In("price", frozenset({"1"})))
