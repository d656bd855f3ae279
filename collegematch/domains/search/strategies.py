"""
Matcher Strategies - Independent ways of deciding that a record matches.

Each strategy reads only the normalized query and one immutable record and
returns its own list of hits, so strategies can run concurrently without
coordination.

Strategies:
- exact: folded field contains the folded query
- abbreviation: "A.J." / "A J" / "AJ" variants against the uppercased field
- token_partial: a single field token contains the query
- fuzzy: position-aligned character overlap (or edit alignment)
- phonetic: Soundex / Metaphone equivalence with a field token
- wildcard: '*' and '?' glob over the whole field
- synonym, location, semantic: query expansion and word similarity
- relevance: BM25 term weighting across the whole corpus
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Sequence
from functools import lru_cache
from typing import ClassVar

from rank_bm25 import BM25Okapi
from rapidfuzz import fuzz
from rapidfuzz.distance import Levenshtein

from collegematch.config.errors import StrategyFailure

from .lexicon import expand_location, expand_synonyms
from .models import MatchHit, ScoringConfig, SearchableRecord, SearchOptions, StrategyName
from .normalizer import NormalizedForm, normalize
from .phonetics import phonetic_codes

logger = logging.getLogger(__name__)

__all__ = [
    "FieldStrategy",
    "ExactSubstringStrategy",
    "AbbreviationStrategy",
    "TokenPartialStrategy",
    "FuzzyStrategy",
    "PhoneticStrategy",
    "WildcardStrategy",
    "SynonymStrategy",
    "LocationStrategy",
    "SemanticStrategy",
    "CorpusStrategy",
    "RelevanceStrategy",
    "iter_field_values",
    "build_strategies",
    "enabled_strategies",
]

_token_codes = lru_cache(maxsize=16384)(phonetic_codes)


def iter_field_values(
    record: SearchableRecord,
    fields: Sequence[str] = (),
) -> Iterator[tuple[str, NormalizedForm]]:
    """
    Yield (field name, normalized value) for the fields to search.

    Missing and blank values are skipped. Values that are neither text nor
    numbers raise StrategyFailure.
    """
    names = fields or tuple(record.fields)
    for name in names:
        value = record.fields.get(name)
        if value is None:
            continue
        if not isinstance(value, (str, int, float)):
            raise StrategyFailure(
                f"Malformed field {name!r} on record {record.id!r}",
                details={"record_id": record.id, "field": name, "type": type(value).__name__},
            )
        form = normalize(value)
        if form.text:
            yield name, form


class FieldStrategy:
    """Base class: scores each searchable field independently."""

    name: ClassVar[StrategyName]

    def __init__(self, scoring: ScoringConfig | None = None) -> None:
        self._scoring = scoring or ScoringConfig()

    def applies_to(self, query: NormalizedForm) -> bool:
        """Whether this strategy has anything to say about the query."""
        return not query.is_empty

    def match(
        self,
        query: NormalizedForm,
        record: SearchableRecord,
        fields: Sequence[str] = (),
    ) -> list[MatchHit]:
        hits = []
        for field_name, form in iter_field_values(record, fields):
            score = self.score_field(query, field_name, form)
            if score is not None:
                hits.append(MatchHit(record.id, self.name, field_name, score))
        return hits

    def score_field(
        self,
        query: NormalizedForm,
        field_name: str,
        value: NormalizedForm,
    ) -> float | None:
        """Raw score in (0, 1] for a matching field, None otherwise."""
        raise NotImplementedError


class ExactSubstringStrategy(FieldStrategy):
    name = StrategyName.EXACT

    def score_field(
        self, query: NormalizedForm, field_name: str, value: NormalizedForm
    ) -> float | None:
        if query.folded and query.folded in value.folded:
            return 1.0
        return None


class AbbreviationStrategy(FieldStrategy):
    name = StrategyName.ABBREVIATION

    def score_field(
        self, query: NormalizedForm, field_name: str, value: NormalizedForm
    ) -> float | None:
        haystack = value.text.upper()
        if any(variant in haystack for variant in query.variants):
            return 0.8
        return None


class TokenPartialStrategy(FieldStrategy):
    name = StrategyName.TOKEN_PARTIAL

    def score_field(
        self, query: NormalizedForm, field_name: str, value: NormalizedForm
    ) -> float | None:
        needle = query.folded
        if needle and any(needle in token for token in value.tokens):
            return 0.6
        return None


class FuzzyStrategy(FieldStrategy):
    """
    Character-overlap matching.

    The default "positional" metric counts characters that agree position by
    position between the query and the same-length prefix of the field. It
    is cheap but blind to insertions and transpositions. The "edit" metric
    uses the best edit-distance alignment of the query inside the field
    instead; both share the threshold and the score-equals-ratio contract.
    """

    name = StrategyName.FUZZY

    def score_field(
        self, query: NormalizedForm, field_name: str, value: NormalizedForm
    ) -> float | None:
        needle = query.folded
        if not needle:
            return None

        if self._scoring.fuzzy_metric == "edit":
            ratio = fuzz.partial_ratio(needle, value.folded) / 100.0
        else:
            prefix = value.folded[: len(needle)]
            matches = sum(1 for a, b in zip(needle, prefix) if a == b)
            ratio = matches / len(needle)

        if ratio > self._scoring.fuzzy_threshold:
            return ratio
        return None


class PhoneticStrategy(FieldStrategy):
    name = StrategyName.PHONETIC

    def applies_to(self, query: NormalizedForm) -> bool:
        return any(ch.isalpha() for ch in query.collapsed)

    def score_field(
        self, query: NormalizedForm, field_name: str, value: NormalizedForm
    ) -> float | None:
        query_soundex, query_metaphone = _token_codes(query.collapsed)
        for token in value.tokens:
            token_soundex, token_metaphone = _token_codes(token)
            if query_soundex and query_soundex == token_soundex:
                return 0.4
            if query_metaphone and query_metaphone == token_metaphone:
                return 0.4
        return None


@lru_cache(maxsize=256)
def _glob_regex(pattern: str) -> re.Pattern[str]:
    parts = []
    for ch in pattern:
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        elif ch.isspace():
            parts.append(r"\s+")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


class WildcardStrategy(FieldStrategy):
    """Glob match anchored at both ends of the field value."""

    name = StrategyName.WILDCARD

    def applies_to(self, query: NormalizedForm) -> bool:
        return query.has_wildcard

    def score_field(
        self, query: NormalizedForm, field_name: str, value: NormalizedForm
    ) -> float | None:
        if _glob_regex(query.text).fullmatch(value.text):
            return 1.0
        return None


class SynonymStrategy(FieldStrategy):
    name = StrategyName.SYNONYM

    def score_field(
        self, query: NormalizedForm, field_name: str, value: NormalizedForm
    ) -> float | None:
        if any(synonym in value.folded for synonym in expand_synonyms(query.folded)):
            return 1.0
        return None


class LocationStrategy(FieldStrategy):
    """Alternative place names (bangalore/bengaluru) in location fields only."""

    name = StrategyName.LOCATION

    def score_field(
        self, query: NormalizedForm, field_name: str, value: NormalizedForm
    ) -> float | None:
        if field_name not in self._scoring.location_fields:
            return None
        if any(variant in value.folded for variant in expand_location(query.folded)):
            return 1.0
        return None


class SemanticStrategy(FieldStrategy):
    """Word overlap blended with per-word edit similarity."""

    name = StrategyName.SEMANTIC

    def score_field(
        self, query: NormalizedForm, field_name: str, value: NormalizedForm
    ) -> float | None:
        query_words = [w for w in query.tokens if len(w) > 2]
        field_words = [w for w in value.tokens if len(w) > 2]
        if not query_words or not field_words:
            return None

        common = sum(1 for word in query_words if word in field_words)
        overlap = common / max(len(query_words), len(field_words))

        best_total = 0.0
        for query_word in query_words:
            best_total += max(
                Levenshtein.normalized_similarity(query_word, field_word)
                for field_word in field_words
            )
        similarity = best_total / len(query_words)

        score = overlap * 0.6 + similarity * 0.4
        if score > self._scoring.semantic_threshold:
            return min(score, 1.0)
        return None


class CorpusStrategy:
    """Base class: scores every record relative to the rest of the corpus."""

    name: ClassVar[StrategyName]

    def __init__(self, scoring: ScoringConfig | None = None) -> None:
        self._scoring = scoring or ScoringConfig()

    def applies_to(self, query: NormalizedForm) -> bool:
        return bool(query.tokens)

    def match_corpus(
        self,
        query: NormalizedForm,
        corpus: Sequence[SearchableRecord],
        fields: Sequence[str] = (),
    ) -> tuple[list[MatchHit], list[int | str]]:
        """Hits for the whole corpus, plus ids of records that could not be read."""
        raise NotImplementedError


class RelevanceStrategy(CorpusStrategy):
    """
    Keyword relevance with BM25 (Okapi) weighting.

    Each record's searched fields form one document. Scores are divided by
    the best score in the corpus, so the top record gets 1.0 and the rest
    are relative to it. Terms present in most records carry little or no
    weight.
    """

    name = StrategyName.RELEVANCE

    def match_corpus(
        self,
        query: NormalizedForm,
        corpus: Sequence[SearchableRecord],
        fields: Sequence[str] = (),
    ) -> tuple[list[MatchHit], list[int | str]]:
        failed: list[int | str] = []
        indexed: list[tuple[SearchableRecord, list[tuple[str, NormalizedForm]]]] = []
        documents: list[list[str]] = []

        for record in corpus:
            try:
                values = list(iter_field_values(record, fields))
            except StrategyFailure as e:
                logger.warning("Strategy %s failed: %s", self.name.value, e.message)
                failed.append(record.id)
                continue
            tokens = [token for _, form in values for token in form.tokens]
            if tokens:
                indexed.append((record, values))
                documents.append(tokens)

        if not documents:
            return [], failed

        terms = list(dict.fromkeys(query.tokens))
        scores = BM25Okapi(documents).get_scores(terms)
        best = float(max(scores))
        if best <= 0:
            return [], failed

        hits = []
        for (record, values), score in zip(indexed, scores):
            relevance = float(score) / best
            if relevance <= self._scoring.relevance_threshold:
                continue
            for field_name, form in values:
                if any(term in form.tokens for term in terms):
                    hits.append(MatchHit(record.id, self.name, field_name, relevance))
        return hits, failed


_STRATEGY_CLASSES: tuple[type[FieldStrategy | CorpusStrategy], ...] = (
    ExactSubstringStrategy,
    AbbreviationStrategy,
    TokenPartialStrategy,
    FuzzyStrategy,
    PhoneticStrategy,
    WildcardStrategy,
    SynonymStrategy,
    LocationStrategy,
    SemanticStrategy,
    RelevanceStrategy,
)


def build_strategies(
    scoring: ScoringConfig | None = None,
) -> dict[StrategyName, FieldStrategy | CorpusStrategy]:
    """Instantiate every strategy against one scoring config."""
    return {cls.name: cls(scoring) for cls in _STRATEGY_CLASSES}


def enabled_strategies(options: SearchOptions) -> list[StrategyName]:
    """Strategies switched on by the options, in canonical order."""
    switches = {
        StrategyName.EXACT: True,
        StrategyName.ABBREVIATION: options.abbreviation,
        StrategyName.TOKEN_PARTIAL: True,
        StrategyName.FUZZY: options.fuzzy,
        StrategyName.PHONETIC: options.phonetic,
        StrategyName.WILDCARD: options.wildcard,
        StrategyName.SYNONYM: options.synonyms,
        StrategyName.LOCATION: options.location,
        StrategyName.SEMANTIC: options.semantic,
        StrategyName.RELEVANCE: options.relevance,
    }
    return [name for name in StrategyName if switches[name]]
