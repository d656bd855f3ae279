"""
Search Contracts - Interfaces for search domain.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from .models import MatchHit, RankedResult, SearchableRecord, SearchOptions, StrategyName
from .normalizer import NormalizedForm


@runtime_checkable
class MatchStrategy(Protocol):
    """Contract for a single matching strategy."""

    name: StrategyName

    def applies_to(self, query: NormalizedForm) -> bool:
        """Whether the strategy should run for this query."""
        ...

    def match(
        self,
        query: NormalizedForm,
        record: SearchableRecord,
        fields: Sequence[str] = (),
    ) -> list[MatchHit]:
        """Hits for one record; must not mutate shared state."""
        ...


@runtime_checkable
class CorpusMatchStrategy(Protocol):
    """Contract for a strategy that scores records against the whole corpus."""

    name: StrategyName

    def applies_to(self, query: NormalizedForm) -> bool:
        """Whether the strategy should run for this query."""
        ...

    def match_corpus(
        self,
        query: NormalizedForm,
        corpus: Sequence[SearchableRecord],
        fields: Sequence[str] = (),
    ) -> tuple[list[MatchHit], list[int | str]]:
        """Hits plus the ids of records that failed; must not mutate shared state."""
        ...


@runtime_checkable
class ResultCache(Protocol):
    """Contract for ranked-result caching."""

    def get(
        self,
        query: str,
        fields: Sequence[str],
        options: SearchOptions | Mapping[str, Any] | None,
    ) -> list[RankedResult] | None:
        """Get cached results, None on a miss."""
        ...

    def set(
        self,
        query: str,
        fields: Sequence[str],
        options: SearchOptions | Mapping[str, Any] | None,
        results: Sequence[RankedResult],
    ) -> None:
        """Cache results."""
        ...

    def clear(self) -> int:
        """Drop every entry."""
        ...


@runtime_checkable
class SearchEngine(Protocol):
    """Contract for search implementations."""

    async def search(
        self,
        query_text: str,
        corpus: Sequence[SearchableRecord],
        fields: Sequence[str] = (),
        options: SearchOptions | Mapping[str, Any] | None = None,
        *,
        strict: bool = False,
    ) -> list[RankedResult]:
        """Execute search and return ranked results."""
        ...
