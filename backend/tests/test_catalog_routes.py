from __future__ import annotations

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from storefront.main import create_app
from storefront.services.catalog.result_cache import NullResultCache, ResultCache
from storefront.services.catalog.store import ProductStore

from conftest import CountingStore, make_product


def _client(store, cache=None) -> TestClient:
    return TestClient(create_app(store=store, cache=cache or NullResultCache()))


@pytest.fixture
def scenario_store() -> CountingStore:
    return CountingStore(
        [
            make_product("a1", category_id="1", subcategory_id="1-2", minutes=1),
            make_product("a2", category_id="1", subcategory_id="1-2", minutes=2),
            make_product("a3", category_id="1", subcategory_id="1-2", minutes=3),
            make_product("b1", category_id="1", subcategory_id="1-3", minutes=4),
            make_product("b2", category_id="1", subcategory_id="1-3", minutes=5),
            make_product("k1", name="Чайник 1800", category_id="7", manufacturer="Bork",
                         characteristics={"Power": "1800W"}, minutes=6),
            make_product("k2", name="Чайник 2000", category_id="7", manufacturer="Bork",
                         characteristics={"Power": "2000W"}, minutes=7),
            make_product("c1", name="Кофемашина X", category_id="2", manufacturer="Saeco", minutes=8),
            make_product("c2", name="Кофе в зернах", description="Арабика", category_id="2", minutes=9),
        ]
    )


def test_subcategory_filter_returns_only_that_subcategory(scenario_store) -> None:
    response = _client(scenario_store).get("/catalog", params={"categoryId": "1", "subcategories": "1-2"})

    assert response.status_code == 200
    body = response.json()
    assert [p["id"] for p in body["products"]] == ["a1", "a2", "a3"]
    assert body["pagination"] == {
        "page": 1,
        "limit": 24,
        "total": 3,
        "totalPages": 1,
        "hasNextPage": False,
        "hasPrevPage": False,
        "totalIsExact": True,
    }


def test_characteristic_filter_matches_value(scenario_store) -> None:
    response = _client(scenario_store).get(
        "/catalog", params={"characteristics": json.dumps({"Power": ["1800W"]})}
    )

    body = response.json()
    assert [p["id"] for p in body["products"]] == ["k1"]
    assert body["products"][0]["characteristics"] == [{"name": "Power", "value": "1800W"}]
    assert body["products"][0]["categoryId"] == "7"


def test_search_requires_every_token(scenario_store) -> None:
    response = _client(scenario_store).get("/catalog", params={"search": "кофе машина"})

    assert [p["id"] for p in response.json()["products"]] == ["c1"]


def test_malformed_parameters_degrade(scenario_store) -> None:
    response = _client(scenario_store).get(
        "/catalog", params={"characteristics": "{oops", "page": "abc", "limit": "-5"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["page"] == 1
    assert body["pagination"]["limit"] == 1
    assert body["pagination"]["total"] == 9
    assert len(body["products"]) == 1


def test_stats_endpoint_shape(scenario_store) -> None:
    response = _client(scenario_store).get("/catalog/stats", params={"categoryId": "7", "manufacturers": "Bork"})

    assert response.status_code == 200
    assert response.json() == {
        "manufacturers": ["Bork"],
        "characteristics": {"Power": ["1800W", "2000W"]},
        "availableCategories": ["7"],
        "totalProducts": 2,
    }


def test_repeated_request_is_served_from_cache(scenario_store) -> None:
    client = _client(scenario_store, cache=ResultCache(maxsize=100))

    client.get("/catalog", params={"manufacturers": "Bork,Saeco"})
    client.get("/catalog", params={"manufacturers": "Saeco,Bork"})

    assert scenario_store.calls["count"] == 1
    assert client.get("/health").json()["cache"]["hits"] == 1


class _TimeoutStore(ProductStore):
    async def count(self, predicate):
        await asyncio.sleep(10)
        return 0

    async def distinct(self, field, predicate):
        await asyncio.sleep(10)
        return []


class _EmptyStore(ProductStore):
    async def count(self, predicate):
        return 0

    async def find(self, predicate, *, skip=0, limit=None):
        return []


def test_store_timeout_is_distinct_from_empty_result(monkeypatch: pytest.MonkeyPatch) -> None:
    from storefront.core.config import settings

    monkeypatch.setattr(settings, "CATALOG_STORE_TIMEOUT_SECONDS", 0.01)

    failed = _client(_TimeoutStore()).get("/catalog")
    empty = _client(_EmptyStore()).get("/catalog")
    stats_failed = _client(_TimeoutStore()).get("/catalog/stats")

    assert failed.status_code == 503
    assert failed.json()["detail"]["kind"] == "store_timeout"
    assert stats_failed.status_code == 503
    assert empty.status_code == 200
    assert empty.json()["products"] == []
    assert empty.json()["pagination"]["total"] == 0


def test_stats_accept_single_subcategory_alias(scenario_store) -> None:
    response = _client(scenario_store).get("/catalog/stats", params={"categoryId": "1", "subcategoryId": "1-3"})

    assert response.status_code == 200
    assert response.json()["totalProducts"] == 2


def test_stats_total_follows_manufacturer_selection(scenario_store) -> None:
    client = _client(scenario_store)

    narrowed = client.get("/catalog/stats", params={"categoryId": "2", "manufacturers": "Saeco"}).json()
    whole = client.get("/catalog/stats", params={"categoryId": "2"}).json()

    assert narrowed["totalProducts"] == 1
    assert whole["totalProducts"] == 2
    assert narrowed["manufacturers"] == ["Saeco"]
