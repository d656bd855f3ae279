"""
Result Fusion & Ranker - Merge per-strategy hits into one ranked list.

Scoring:
- the strongest hit per (record, strategy) counts once
- composite score = sum(raw_score * strategy weight)
- optional fixed bonus when a location field matched
- order: composite score desc, agreeing strategies desc, corpus order
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence

from .models import MatchHit, RankedResult, ScoringConfig, SearchableRecord, StrategyName

logger = logging.getLogger(__name__)

__all__ = ["rank"]

_STRATEGY_ORDER = {name: position for position, name in enumerate(StrategyName)}


def rank(
    hits: Iterable[MatchHit],
    records: Sequence[SearchableRecord],
    scoring: ScoringConfig | None = None,
    location: bool = False,
) -> Iterator[RankedResult]:
    """
    Fuse strategy hits into ranked results.

    Args:
        hits: Hits from any number of strategies, in any order
        records: Corpus in insertion order (used for lookup and tiebreaks)
        scoring: Weights and location bonus
        location: Apply the location-field bonus

    Returns:
        One-shot iterator of RankedResult, one per matched record
    """
    scoring = scoring or ScoringConfig()
    positions: dict[int | str, int] = {}
    duplicates = 0
    for position, record in enumerate(records):
        if record.id in positions:
            duplicates += 1
            continue
        positions[record.id] = position

    if duplicates:
        logger.warning(
            "Corpus has %d records with duplicate ids; only the first of each is ranked",
            duplicates,
        )

    best: dict[int | str, dict[StrategyName, MatchHit]] = {}
    fields: dict[int | str, dict[str, None]] = {}
    dropped = 0
    for hit in hits:
        if hit.record_id not in positions:
            dropped += 1
            continue
        fields.setdefault(hit.record_id, {}).setdefault(hit.field, None)
        per_strategy = best.setdefault(hit.record_id, {})
        current = per_strategy.get(hit.strategy)
        if current is None or hit.raw_score > current.raw_score:
            per_strategy[hit.strategy] = hit

    if dropped:
        logger.debug("Ranker dropped %d hits for unknown records", dropped)

    scored = []
    for record_id, per_strategy in best.items():
        score = sum(
            hit.raw_score * scoring.weight(strategy)
            for strategy, hit in per_strategy.items()
        )
        matched_fields = tuple(fields[record_id])
        if location and any(f in scoring.location_fields for f in matched_fields):
            score += scoring.location_bonus

        strategies = tuple(sorted(per_strategy, key=_STRATEGY_ORDER.__getitem__))
        scored.append((round(score, 6), strategies, matched_fields, positions[record_id]))

    scored.sort(key=lambda item: (-item[0], -len(item[1]), item[3]))

    for score, strategies, matched_fields, position in scored:
        yield RankedResult(
            record=records[position],
            composite_score=score,
            matched_strategies=strategies,
            matched_fields=matched_fields,
        )
