"""
Search Models - Data types for search domain.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Literal

from pydantic import BaseModel, Field, field_serializer, field_validator


class StrategyName(str, Enum):
    """Matcher strategies, in canonical reporting order."""

    EXACT = "exact"
    ABBREVIATION = "abbreviation"
    TOKEN_PARTIAL = "token_partial"
    FUZZY = "fuzzy"
    PHONETIC = "phonetic"
    WILDCARD = "wildcard"
    SYNONYM = "synonym"
    LOCATION = "location"
    SEMANTIC = "semantic"
    RELEVANCE = "relevance"


DEFAULT_WEIGHTS: dict[StrategyName, float] = {
    StrategyName.EXACT: 100.0,
    StrategyName.ABBREVIATION: 80.0,
    StrategyName.TOKEN_PARTIAL: 60.0,
    StrategyName.FUZZY: 40.0,
    StrategyName.PHONETIC: 30.0,
    StrategyName.WILDCARD: 100.0,
    StrategyName.SYNONYM: 30.0,
    StrategyName.LOCATION: 25.0,
    StrategyName.SEMANTIC: 20.0,
    StrategyName.RELEVANCE: 30.0,
}


class SearchableRecord(BaseModel):
    """A unit of the corpus. Field values that are empty are never matched."""

    id: int | str
    fields: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)

    model_config = {"frozen": True}

    @field_validator("fields", mode="after")
    @classmethod
    def _freeze_fields(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @field_serializer("fields")
    def _dump_fields(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return dict(value)


class SearchOptions(BaseModel):
    """Per-search strategy switches. Exact and token-partial always run."""

    fuzzy: bool = False
    phonetic: bool = False
    location: bool = False
    abbreviation: bool = False
    wildcard: bool = False
    synonyms: bool = False
    semantic: bool = False
    relevance: bool = False

    model_config = {"frozen": True, "extra": "ignore"}


class SearchQuery(BaseModel):
    """Search request."""

    text: str = ""
    fields: tuple[str, ...] = ()
    options: SearchOptions = Field(default_factory=SearchOptions)

    model_config = {"frozen": True}


class ScoringConfig(BaseModel):
    """Tunable ranking constants."""

    weights: dict[StrategyName, float] = Field(
        default_factory=lambda: dict(DEFAULT_WEIGHTS)
    )
    location_bonus: float = 10.0
    location_fields: tuple[str, ...] = ("city", "state", "district")
    fuzzy_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    fuzzy_metric: Literal["positional", "edit"] = "positional"
    semantic_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    relevance_threshold: float = Field(default=0.1, ge=0.0, le=1.0)

    model_config = {"frozen": True}

    def weight(self, strategy: StrategyName) -> float:
        """Weight for a strategy, zero when unconfigured."""
        return self.weights.get(strategy, 0.0)


@dataclass(frozen=True, slots=True)
class MatchHit:
    """One strategy's evidence that a record field matches the query."""

    record_id: int | str
    strategy: StrategyName
    field: str
    raw_score: float


class RankedResult(BaseModel):
    """Fused, scored search result."""

    record: SearchableRecord
    composite_score: float
    matched_strategies: tuple[StrategyName, ...] = ()
    matched_fields: tuple[str, ...] = ()

    model_config = {"frozen": True}
