"""
Search Domain - Multi-strategy fuzzy matching for college records.

This domain handles:
- Text normalization and abbreviation variants
- Independent matcher strategies (exact, abbreviation, fuzzy, phonetic, ...)
- Weighted result fusion and ranking
- LRU result caching
- Query validation policy
"""

from .cache import SearchResultCache
from .contracts import CorpusMatchStrategy, MatchStrategy, ResultCache, SearchEngine
from .engine import CollegeSearchEngine
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

__all__ = [
    "SearchEngine",
    "MatchStrategy",
    "CorpusMatchStrategy",
    "ResultCache",
    "SearchableRecord",
    "SearchOptions",
    "SearchQuery",
    "ScoringConfig",
    "StrategyName",
    "MatchHit",
    "RankedResult",
    "NormalizedForm",
    "normalize",
    "rank",
    "QueryPolicy",
    "SearchResultCache",
    "CollegeSearchEngine",
]
