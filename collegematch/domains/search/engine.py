"""
College Search Engine - Fan out matcher strategies, fuse, rank and cache.

Features:
- Query policy validation (lenient by default, strict on request)
- Concurrent strategy execution (asyncio.gather over worker threads)
- Per-record failure isolation
- LRU result cache with corruption recovery
- Results computed before a cache clear are never cached after it
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from collegematch.config.errors import CacheCorruptionError, InvalidQueryError, StrategyFailure

from .cache import SearchResultCache
from .models import (
    MatchHit,
    RankedResult,
    ScoringConfig,
    SearchableRecord,
    SearchOptions,
    SearchQuery,
    StrategyName,
)
from .normalizer import NormalizedForm, normalize
from .policy import QueryPolicy
from .ranker import rank
from .strategies import CorpusStrategy, FieldStrategy, build_strategies, enabled_strategies

if TYPE_CHECKING:
    from collegematch.config.settings import Settings

logger = logging.getLogger(__name__)

__all__ = ["CollegeSearchEngine"]


class CollegeSearchEngine:
    """
    Multi-strategy fuzzy search over a caller-supplied corpus.

    Example:
        >>> engine = CollegeSearchEngine()
        >>> results = await engine.search("*medical*", corpus, options={"wildcard": True})
    """

    def __init__(
        self,
        scoring: ScoringConfig | None = None,
        cache: SearchResultCache | None = None,
        policy: QueryPolicy | None = None,
    ) -> None:
        """
        Initialize search engine.

        Args:
            scoring: Strategy weights and thresholds
            cache: Result cache (a 100-entry cache by default)
            policy: Query validation rules
        """
        self._scoring = scoring or ScoringConfig()
        self._cache = cache if cache is not None else SearchResultCache()
        self._policy = policy or QueryPolicy()
        self._strategies = build_strategies(self._scoring)
        self._cache_lock = asyncio.Lock()
        self._cache_generation = 0
        self._strategy_failures = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> CollegeSearchEngine:
        """Build an engine from application Settings."""
        scoring = ScoringConfig(
            location_bonus=settings.search_location_bonus,
            fuzzy_threshold=settings.search_fuzzy_threshold,
            fuzzy_metric=settings.search_fuzzy_metric,
            semantic_threshold=settings.search_semantic_threshold,
            relevance_threshold=settings.search_relevance_threshold,
        )
        return cls(
            scoring=scoring,
            cache=SearchResultCache(capacity=settings.search_cache_capacity),
            policy=QueryPolicy(max_length=settings.search_max_query_length),
        )

    @property
    def scoring(self) -> ScoringConfig:
        return self._scoring

    async def search(
        self,
        query_text: str,
        corpus: Sequence[SearchableRecord],
        fields: Sequence[str] = (),
        options: SearchOptions | Mapping[str, Any] | None = None,
        *,
        strict: bool = False,
    ) -> list[RankedResult]:
        """
        Search the corpus.

        Args:
            query_text: Raw user input
            corpus: Read-only snapshot of records, in insertion order
            fields: Field names to search (empty means every field)
            options: Strategy switches
            strict: Raise InvalidQueryError instead of returning []

        Returns:
            Ranked results, best first
        """
        query = SearchQuery(
            text=query_text if isinstance(query_text, str) else "",
            fields=tuple(fields),
            options=_coerce_options(options),
        )
        return await self.execute(query, corpus, strict=strict)

    async def execute(
        self,
        query: SearchQuery,
        corpus: Sequence[SearchableRecord],
        *,
        strict: bool = False,
    ) -> list[RankedResult]:
        """Run a prepared SearchQuery against the corpus."""
        try:
            text = self._policy.validate(query.text)
        except InvalidQueryError as e:
            if strict:
                raise
            logger.warning("Invalid query ignored: %s details=%s", e.message, e.details)
            return []

        normalized = normalize(text)
        if normalized.is_empty:
            return []

        generation = self._cache_generation
        cached = await self._cache_get(text, query)
        if cached is not None:
            return cached

        results = await self._compute(normalized, query, corpus)
        await self._cache_set(text, query, results, generation)

        logger.info(
            "Search: query='%s' -> %d results (strategies=%s, corpus=%d)",
            text[:50],
            len(results),
            ",".join(s.value for s in enabled_strategies(query.options)),
            len(corpus),
        )
        return results

    async def clear_cache(self) -> int:
        """Invalidate every cached result (call after corpus updates)."""
        async with self._cache_lock:
            self._cache_generation += 1
            return self._cache.clear()

    def stats(self) -> dict[str, Any]:
        """Cache statistics plus strategy failure count."""
        return {
            "cache": self._cache.stats(),
            "strategy_failures": self._strategy_failures,
        }

    async def _compute(
        self,
        normalized: NormalizedForm,
        query: SearchQuery,
        corpus: Sequence[SearchableRecord],
    ) -> list[RankedResult]:
        """Fan out to enabled strategies, then fuse their hits."""
        active = [
            self._strategies[name]
            for name in enabled_strategies(query.options)
            if self._strategies[name].applies_to(normalized)
        ]

        outcomes = await asyncio.gather(
            *(
                asyncio.to_thread(_run_strategy, strategy, normalized, corpus, query.fields)
                for strategy in active
            )
        )

        hits: list[MatchHit] = []
        failed: set[int | str] = set()
        for strategy_hits, strategy_failed in outcomes:
            hits.extend(strategy_hits)
            failed.update(strategy_failed)

        if failed:
            self._strategy_failures += len(failed)
            logger.warning("Skipped %d records with strategy failures", len(failed))
            hits = [hit for hit in hits if hit.record_id not in failed]

        return list(
            rank(hits, corpus, self._scoring, location=query.options.location)
        )

    async def _cache_get(self, text: str, query: SearchQuery) -> list[RankedResult] | None:
        async with self._cache_lock:
            try:
                return self._cache.get(text, query.fields, query.options)
            except CacheCorruptionError as e:
                logger.error("Cache corrupted, clearing: %s details=%s", e.message, e.details)
                self._cache.clear()
                return None

    async def _cache_set(
        self,
        text: str,
        query: SearchQuery,
        results: list[RankedResult],
        generation: int,
    ) -> None:
        async with self._cache_lock:
            if generation != self._cache_generation:
                logger.debug("Cache cleared during search, not caching: query='%s'", text[:50])
                return
            try:
                self._cache.set(text, query.fields, query.options, results)
            except CacheCorruptionError as e:
                logger.error("Cache corrupted, clearing: %s details=%s", e.message, e.details)
                self._cache.clear()


def _coerce_options(options: SearchOptions | Mapping[str, Any] | None) -> SearchOptions:
    if isinstance(options, SearchOptions):
        return options
    return SearchOptions(**dict(options or {}))


def _run_strategy(
    strategy: FieldStrategy | CorpusStrategy,
    query: NormalizedForm,
    corpus: Sequence[SearchableRecord],
    fields: Sequence[str],
) -> tuple[list[MatchHit], list[int | str]]:
    """Run one strategy over the corpus, isolating per-record failures."""
    if isinstance(strategy, CorpusStrategy):
        return strategy.match_corpus(query, corpus, fields)

    hits: list[MatchHit] = []
    failed: list[int | str] = []
    name: StrategyName = strategy.name

    for record in corpus:
        try:
            hits.extend(strategy.match(query, record, fields))
        except StrategyFailure as e:
            logger.warning("Strategy %s failed: %s", name.value, e.message)
            failed.append(record.id)
        except Exception as e:
            logger.warning(
                "Strategy %s failed on record %r: %s", name.value, record.id, e
            )
            failed.append(record.id)

    return hits, failed
