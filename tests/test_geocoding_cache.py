import pytest

from core.constants import (
    QUERY_CACHE_MAX_SIZE,
    QUERY_CACHE_TTL_SECONDS,
    RESULT_CACHE_MAX_SIZE,
    RESULT_CACHE_TTL_SECONDS,
)
from geocoding.cache import QueryCache, ResultCache, TTLCache
from geocoding.schemas import GeocodingResult, SearchResult


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _ok(address: str = "Via Roma, Roma, Italia") -> GeocodingResult:
    return GeocodingResult(success=True, address=address, full_address=address)


def _hit(name: str = "Via Roma") -> SearchResult:
    return SearchResult(place_id=1, lat="41.9028", lon="12.4964", display_name=name)


def test_result_cache_defaults() -> None:
    cache = ResultCache()

    assert cache.max_size == RESULT_CACHE_MAX_SIZE == 100
    assert cache.ttl_seconds == RESULT_CACHE_TTL_SECONDS == 30 * 60


def test_result_cache_returns_identical_object() -> None:
    cache = ResultCache()
    result = _ok()

    cache.set(41.9028, 12.4964, result)

    assert cache.get(41.9028, 12.4964) is result


def test_result_cache_coalesces_float_noise() -> None:
    cache = ResultCache()
    result = _ok()

    cache.set(41.90280001, 12.49640001, result)

    assert ResultCache.make_key(41.90280001, 12.49640001) == "41.90280,12.49640"
    assert ResultCache.make_key(41.90280004, 12.49640002) == "41.90280,12.49640"
    assert cache.get(41.90280004, 12.49640002) is result
    assert len(cache) == 1


def test_result_cache_keeps_distinct_points_apart() -> None:
    cache = ResultCache()
    cache.set(41.90280, 12.49640, _ok("A"))
    cache.set(41.90290, 12.49640, _ok("B"))

    assert cache.get(41.90280, 12.49640).address == "A"
    assert cache.get(41.90290, 12.49640).address == "B"


def test_result_cache_does_not_store_failures() -> None:
    cache = ResultCache()

    cache.set(41.9, 12.5, GeocodingResult(success=False, error="boom"))

    assert cache.get(41.9, 12.5) is None
    assert cache.size() == 0


def test_result_cache_evicts_oldest_first() -> None:
    cache = ResultCache(max_size=3)
    for index in range(4):
        cache.set(40.0 + index, 12.0, _ok(str(index)))

    assert cache.get(40.0, 12.0) is None
    assert [cache.get(40.0 + i, 12.0).address for i in (1, 2, 3)] == ["1", "2", "3"]
    assert len(cache) == 3


def test_result_cache_eviction_is_fifo_not_lru() -> None:
    cache = ResultCache(max_size=2)
    cache.set(1.0, 1.0, _ok("first"))
    cache.set(2.0, 2.0, _ok("second"))

    # Reading does not protect the oldest entry
    assert cache.get(1.0, 1.0) is not None
    cache.set(3.0, 3.0, _ok("third"))

    assert cache.get(1.0, 1.0) is None
    assert cache.get(2.0, 2.0) is not None


def test_result_cache_default_capacity_is_bounded() -> None:
    cache = ResultCache()
    for index in range(RESULT_CACHE_MAX_SIZE + 1):
        cache.set(0.001 * index, 0.0, _ok(str(index)))

    assert len(cache) == RESULT_CACHE_MAX_SIZE
    assert cache.get(0.0, 0.0) is None
    assert cache.get(0.001, 0.0).address == "1"


def test_result_cache_expires_after_ttl() -> None:
    clock = FakeClock()
    cache = ResultCache(clock=clock)
    cache.set(41.9028, 12.4964, _ok())

    clock.advance(RESULT_CACHE_TTL_SECONDS)
    assert cache.get(41.9028, 12.4964) is not None

    clock.advance(0.001)
    assert cache.get(41.9028, 12.4964) is None
    assert len(cache) == 0


def test_resetting_a_key_refreshes_position_and_timestamp() -> None:
    clock = FakeClock()
    cache = TTLCache[str](max_size=2, ttl_seconds=10, clock=clock)
    cache.set_entry("a", "1")
    cache.set_entry("b", "2")

    clock.advance(8)
    cache.set_entry("a", "1b")
    cache.set_entry("c", "3")

    assert "b" not in cache
    clock.advance(5)
    assert cache.get_entry("a") == "1b"


def test_clear_empties_cache() -> None:
    cache = ResultCache()
    cache.set(1.0, 2.0, _ok())

    cache.clear()

    assert cache.get(1.0, 2.0) is None
    assert cache.size() == 0


def test_ttl_cache_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        TTLCache[str](max_size=0, ttl_seconds=1)


def test_query_cache_defaults() -> None:
    cache = QueryCache()

    assert cache.max_size == QUERY_CACHE_MAX_SIZE == 50
    assert cache.ttl_seconds == QUERY_CACHE_TTL_SECONDS == 15 * 60


def test_query_cache_is_case_and_whitespace_insensitive() -> None:
    cache = QueryCache()
    results = [_hit()]

    cache.set("Via Roma", results)

    assert cache.get(" via roma ") is results
    assert cache.get("VIA ROMA") is results


def test_query_cache_skips_empty_results() -> None:
    cache = QueryCache()

    cache.set("nowhere", [])

    assert cache.get("nowhere") is None


def test_query_cache_expires_after_ttl() -> None:
    clock = FakeClock()
    cache = QueryCache(clock=clock)
    cache.set("via roma", [_hit()])

    clock.advance(QUERY_CACHE_TTL_SECONDS + 1)

    assert cache.get("via roma") is None


def test_query_and_result_caches_are_disjoint() -> None:
    results = ResultCache()
    queries = QueryCache()

    queries.set("41.90280,12.49640", [_hit()])

    assert results.get(41.9028, 12.4964) is None
