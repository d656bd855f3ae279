"""
Tests for result fusion, ranking and the result cache.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from collegematch.config.errors import CacheCorruptionError

from .cache import CacheEntry, SearchResultCache
from .contracts import ResultCache
from .models import MatchHit, RankedResult, ScoringConfig, SearchableRecord, SearchOptions, StrategyName
from .ranker import rank


@pytest.fixture
def records() -> list[SearchableRecord]:
    return [
        SearchableRecord(id="a", fields={"name": "ALPHA COLLEGE", "city": "Mysore"}),
        SearchableRecord(id="b", fields={"name": "BETA COLLEGE", "city": "Mysore"}),
        SearchableRecord(id="c", fields={"name": "GAMMA COLLEGE", "city": "Udupi"}),
    ]


def _hit(record_id: int | str, strategy: StrategyName, field: str = "name", raw: float = 1.0) -> MatchHit:
    return MatchHit(record_id, strategy, field, raw)


# --- Ranker Tests ---


def test_rank_is_lazy(records: list[SearchableRecord]) -> None:
    assert isinstance(rank([], records), Iterator)
    assert list(rank([], records)) == []


def test_rank_sums_weighted_scores(records: list[SearchableRecord]) -> None:
    """Test composite = sum of raw score times weight."""
    hits = [
        _hit("b", StrategyName.FUZZY, raw=0.9),
        _hit("a", StrategyName.EXACT),
        _hit("a", StrategyName.TOKEN_PARTIAL, raw=0.6),
    ]

    results = list(rank(hits, records))

    assert [r.record.id for r in results] == ["a", "b"]
    assert results[0].composite_score == pytest.approx(136.0)
    assert results[1].composite_score == pytest.approx(36.0)
    assert results[0].matched_strategies == (StrategyName.EXACT, StrategyName.TOKEN_PARTIAL)


def test_rank_counts_strategy_once(records: list[SearchableRecord]) -> None:
    """Test several hits from one strategy keep only the strongest."""
    hits = [
        _hit("a", StrategyName.FUZZY, "name", 0.7),
        _hit("a", StrategyName.FUZZY, "city", 0.9),
    ]

    [result] = rank(hits, records)

    assert result.composite_score == pytest.approx(36.0)
    assert result.matched_fields == ("name", "city")


def test_rank_location_bonus(records: list[SearchableRecord]) -> None:
    """Test the bonus applies only when asked and a location field matched."""
    hits = [_hit("a", StrategyName.EXACT, "city"), _hit("b", StrategyName.EXACT, "name")]

    plain = {r.record.id: r.composite_score for r in rank(hits, records)}
    bonus = {r.record.id: r.composite_score for r in rank(hits, records, location=True)}

    assert plain == {"a": 100.0, "b": 100.0}
    assert bonus == {"a": 110.0, "b": 100.0}


def test_rank_custom_scoring(records: list[SearchableRecord]) -> None:
    scoring = ScoringConfig(weights={StrategyName.EXACT: 5.0}, location_bonus=1.0)
    hits = [_hit("c", StrategyName.EXACT, "city"), _hit("c", StrategyName.FUZZY, "name")]

    [result] = rank(hits, records, scoring, location=True)

    assert result.composite_score == pytest.approx(6.0)


def test_rank_tiebreaks(records: list[SearchableRecord]) -> None:
    """Test ties go to more strategies, then corpus order."""
    hits = [
        _hit("c", StrategyName.EXACT),
        _hit("a", StrategyName.EXACT),
        _hit("b", StrategyName.ABBREVIATION, raw=0.8),
        _hit("b", StrategyName.TOKEN_PARTIAL, raw=0.6),
    ]

    results = list(rank(hits, records))

    assert [r.composite_score for r in results] == [100.0, 100.0, 100.0]
    assert [r.record.id for r in results] == ["b", "a", "c"]


def test_rank_drops_unknown_records(records: list[SearchableRecord]) -> None:
    hits = [_hit("zzz", StrategyName.EXACT), _hit("c", StrategyName.EXACT)]

    assert [r.record.id for r in rank(hits, records)] == ["c"]


def test_rank_duplicate_ids_keep_first(caplog: pytest.LogCaptureFixture) -> None:
    """Test a repeated id ranks the first record only and is reported."""
    records = [
        SearchableRecord(id=1, fields={"name": "ALPHA"}),
        SearchableRecord(id=1, fields={"name": "BETA DENTAL"}),
    ]

    with caplog.at_level(logging.WARNING):
        results = list(rank([_hit(1, StrategyName.EXACT)], records))

    assert [r.record.fields["name"] for r in results] == ["ALPHA"]
    assert "duplicate ids" in caplog.text


# --- SearchResultCache Tests ---


@pytest.fixture
def ranked(records: list[SearchableRecord]) -> list[RankedResult]:
    return list(rank([_hit("a", StrategyName.EXACT)], records))


def test_cache_miss_then_hit(ranked: list[RankedResult]) -> None:
    cache = SearchResultCache()
    options = SearchOptions()

    assert cache.get("alpha", (), options) is None
    cache.set("alpha", (), options, ranked)

    assert cache.get("alpha", (), options) == ranked
    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 0.5


def test_cache_key_normalization() -> None:
    """Test query case, spacing and field order do not split entries."""
    options = SearchOptions(fuzzy=True)
    key = SearchResultCache.generate_key("A.J  Institute", ("name", "city"), options)

    assert key == SearchResultCache.generate_key(" a.j institute ", ("city", "name"), options)
    assert key != SearchResultCache.generate_key("a.j institute", ("name",), options)
    assert key != SearchResultCache.generate_key("a.j institute", ("name", "city"), SearchOptions())


def test_cache_returns_copies(ranked: list[RankedResult]) -> None:
    cache = SearchResultCache()
    cache.set("alpha", (), None, ranked)

    first = cache.get("alpha", (), None)
    first.clear()

    assert cache.get("alpha", (), None) == ranked


def test_cache_evicts_least_recently_used(ranked: list[RankedResult]) -> None:
    cache = SearchResultCache(capacity=2)
    cache.set("one", (), None, ranked)
    cache.set("two", (), None, ranked)
    cache.get("one", (), None)
    cache.set("three", (), None, ranked)

    assert len(cache) == 2
    assert cache.get("two", (), None) is None
    assert cache.get("one", (), None) == ranked
    assert cache.stats()["evictions"] == 1


def test_cache_overwrite_does_not_evict(ranked: list[RankedResult]) -> None:
    cache = SearchResultCache(capacity=1)
    cache.set("one", (), None, ranked)
    cache.set("one", (), None, [])

    assert cache.get("one", (), None) == []
    assert cache.stats()["evictions"] == 0


def test_cache_clear(ranked: list[RankedResult]) -> None:
    cache = SearchResultCache()
    cache.set("one", (), None, ranked)
    cache.set("two", (), None, ranked)

    assert cache.clear() == 2
    assert len(cache) == 0


def test_cache_detects_corruption(ranked: list[RankedResult]) -> None:
    cache = SearchResultCache()
    cache.set("one", (), None, ranked)
    key = SearchResultCache.generate_key("one", (), None)
    cache._entries[key] = CacheEntry(key="other", results=())

    with pytest.raises(CacheCorruptionError):
        cache.get("one", (), None)


def test_cache_rejects_zero_capacity() -> None:
    with pytest.raises(ValueError):
        SearchResultCache(capacity=0)


def test_cache_satisfies_contract() -> None:
    assert isinstance(SearchResultCache(), ResultCache)
