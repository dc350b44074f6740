from __future__ import annotations

import pytest

from storefront.core.config import settings
from storefront.services.catalog.compiler import selection_cache_key
from storefront.services.catalog.result_cache import (
    NullResultCache,
    ResultCache,
    build_result_cache,
)
from storefront.services.catalog.selection import FilterSelection
from storefront.services.catalog.service import CatalogService


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _counter():
    calls = {"n": 0}

    async def compute():
        calls["n"] += 1
        return {"value": calls["n"]}

    return calls, compute


@pytest.mark.asyncio
async def test_hit_within_ttl_skips_compute() -> None:
    clock = _Clock()
    cache = ResultCache(maxsize=10, clock=clock)
    calls, compute = _counter()

    first = await cache.get_or_compute("k", 60, compute)
    clock.now += 59
    second = await cache.get_or_compute("k", 60, compute)

    assert first == second == {"value": 1}
    assert calls["n"] == 1
    assert cache.stats()["hits"] == 1 and cache.stats()["misses"] == 1


@pytest.mark.asyncio
async def test_expired_entry_is_recomputed_and_overwritten() -> None:
    clock = _Clock()
    cache = ResultCache(maxsize=10, clock=clock)
    calls, compute = _counter()

    await cache.get_or_compute("k", 60, compute)
    clock.now += 60
    refreshed = await cache.get_or_compute("k", 60, compute)
    clock.now += 1
    again = await cache.get_or_compute("k", 60, compute)

    assert refreshed == again == {"value": 2}
    assert calls["n"] == 2


@pytest.mark.asyncio
async def test_failed_compute_is_not_cached() -> None:
    cache = ResultCache(maxsize=10)
    attempts = {"n": 0}

    async def flaky():
        attempts["n"] += 1
        if attempts["n"] == 1:
            raise RuntimeError("boom")
        return "ok"

    with pytest.raises(RuntimeError):
        await cache.get_or_compute("k", 60, flaky)
    assert await cache.get_or_compute("k", 60, flaky) == "ok"


@pytest.mark.asyncio
async def test_oldest_entries_are_evicted_past_maxsize() -> None:
    cache = ResultCache(maxsize=2)
    _, compute = _counter()

    for key in ("a", "b", "c"):
        await cache.get_or_compute(key, 60, compute)

    assert cache.get("a", 60) is None
    assert cache.get("c", 60) is not None
    assert cache.stats()["size"] == 2


@pytest.mark.asyncio
async def test_null_cache_always_computes() -> None:
    cache = NullResultCache()
    calls, compute = _counter()

    await cache.get_or_compute("k", 60, compute)
    await cache.get_or_compute("k", 60, compute)

    assert calls["n"] == 2


def test_build_result_cache_respects_setting(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "CATALOG_CACHE_ENABLED", False)
    assert isinstance(build_result_cache(), NullResultCache)

    monkeypatch.setattr(settings, "CATALOG_CACHE_ENABLED", True)
    assert not isinstance(build_result_cache(), NullResultCache)


def test_page_keys_separate_pages_of_one_selection() -> None:
    selection = FilterSelection.build(category_id="1", manufacturers=["Acme"])
    rebuilt = FilterSelection.build(manufacturers=["Acme"], category_id="1")

    first = selection_cache_key("page", selection, page=1, page_size=24)

    assert first == selection_cache_key("page", rebuilt, page_size=24, page=1)
    assert first != selection_cache_key("page", selection, page=2, page_size=24)
    assert first != selection_cache_key("page", selection, page=1, page_size=48)
    assert first.startswith("catalog:page:")


@pytest.mark.asyncio
async def test_service_reuses_cached_page_for_equivalent_selection(store) -> None:
    service = CatalogService(store, cache=ResultCache(maxsize=100))

    first = await service.get_page(FilterSelection.build(category_id="1", manufacturers=["Polair", "Acme"]), 1, 24)
    second = await service.get_page(
        FilterSelection.build(category_id="profoborudovanie", manufacturers=["Acme", "Polair"]), "1", "24"
    )

    assert first is second
    assert store.calls == {"find": 1, "count": 1, "distinct": 0}


@pytest.mark.asyncio
async def test_service_caches_stats_separately_from_pages(store) -> None:
    service = CatalogService(store, cache=ResultCache(maxsize=100))
    selection = FilterSelection.build(category_id="1")

    await service.get_page(selection, 1, 24)
    await service.get_stats(selection)
    await service.get_stats(selection)

    assert store.calls["distinct"] == 3
    assert store.calls["count"] == 2
