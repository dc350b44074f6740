from __future__ import annotations

import pytest

from storefront.services.catalog.compiler import FilterCompiler, selection_cache_key
from storefront.services.catalog.predicates import (
    And,
    Contains,
    Eq,
    HasCharacteristic,
    In,
    MatchAll,
    Or,
)
from storefront.services.catalog.selection import FilterSelection
from storefront.services.catalog.store import matches

from conftest import make_product

compiler = FilterCompiler()


def test_empty_selection_matches_everything() -> None:
    assert compiler.compile(FilterSelection()).predicate == MatchAll()


def test_all_subcategories_selected_equals_whole_category() -> None:
    everything = FilterSelection.build(category_id="2", subcategory_ids=["2-1", "kofevarki", "кофемолки"])
    category_only = FilterSelection.build(category_id="2")

    assert compiler.compile(everything) == compiler.compile(category_only)
    assert compiler.compile(everything).predicate == Eq("category_id", "2")
    assert selection_cache_key("page", compiler.canonicalize(everything)) == selection_cache_key(
        "page", compiler.canonicalize(category_only)
    )


def test_subcategory_matches_canonical_and_bare_ids() -> None:
    query = compiler.compile(FilterSelection.build(category_id="1", subcategory_ids=["1-2"]))

    assert query.predicate == And(
        (
            Eq("category_id", "1"),
            In("subcategory_id", frozenset({"profoborudovanie-holodilnoe-oborudovanie", "1-2"})),
        )
    )


def test_unresolved_subcategories_are_dropped() -> None:
    query = compiler.compile(FilterSelection.build(category_id="1", subcategory_ids=["nope", "1-3"]))

    assert query.selection.subcategory_ids == frozenset({"profoborudovanie-elektromehanicheskoe"})

    only_unknown = compiler.compile(FilterSelection.build(category_id="1", subcategory_ids=["nope"]))
    assert only_unknown.predicate == Eq("category_id", "1")


def test_category_slug_is_normalized_to_id() -> None:
    query = compiler.compile(FilterSelection.build(category_id="profoborudovanie"))
    assert query.predicate == Eq("category_id", "1")


def test_characteristics_are_anded_per_name() -> None:
    query = compiler.compile(
        FilterSelection.build(characteristics={"Power": ["1800W", "2000W"], "Color": ["White"]})
    )

    assert query.predicate == And(
        (
            HasCharacteristic("Color", frozenset({"White"})),
            HasCharacteristic("Power", frozenset({"1800W", "2000W"})),
        )
    )


def test_search_tokens_are_anded_over_field_alternatives() -> None:
    query = compiler.compile(FilterSelection.build(search_text="Кофе машина"))

    assert query.predicate == And(
        (
            Or((Contains("name", "кофе"), Contains("description", "кофе"), Contains("manufacturer", "кофе"))),
            Or((Contains("name", "машина"), Contains("description", "машина"), Contains("manufacturer", "машина"))),
        )
    )


def test_short_search_is_dropped() -> None:
    assert compiler.compile(FilterSelection.build(search_text="a")).predicate == MatchAll()


def test_compile_is_deterministic_for_reordered_input() -> None:
    first = FilterSelection.build(
        category_id="1",
        subcategory_ids=["1-3", "1-2"],
        manufacturers=["Polair", "Acme"],
        characteristics={"Power": ["2000W", "1800W"]},
    )
    second = FilterSelection.build(
        category_id="1",
        subcategory_ids=["profoborudovanie-holodilnoe-oborudovanie", "elektromehanicheskoe"],
        manufacturers=["Acme", "Polair"],
        characteristics={"Power": ["1800W", "2000W"]},
    )

    a, b = compiler.compile(first), compiler.compile(second)
    assert a == b
    assert selection_cache_key("page", a.selection, page=1) == selection_cache_key("page", b.selection, page=1)
    assert selection_cache_key("page", a.selection, page=1) != selection_cache_key("stats", a.selection, page=1)


@pytest.mark.parametrize(
    "product, expected",
    [
        (make_product("a", name="Кофемашина X", description="машина для кофе"), True),
        (make_product("b", name="Кофемашина X"), True),
        (make_product("c", name="Кофемолка", manufacturer="Bosch"), False),
        (make_product("d", name="Кофеварка"), False),
        (make_product("e", name="Чайник", description="Не для кофе", manufacturer="Машина"), True),
    ],
)
def test_search_is_substring_per_token(product, expected) -> None:
    query = compiler.compile(FilterSelection.build(search_text="кофе машина"))
    assert matches(product, query.predicate) is expected
