"""
Search Routes - College search and cache management endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from collegematch.adapters.sqlite import CollegeRepository
from collegematch.config import get_settings
from collegematch.domains.search import CollegeSearchEngine, SearchOptions
from collegematch.interfaces.api.deps import (
    CorpusSnapshot,
    get_corpus,
    get_repository,
    get_search_engine,
    reload_corpus,
)

router = APIRouter()


class SearchRequest(BaseModel):
    """Search request body."""

    query: str = Field(..., description="Search query")
    fields: list[str] = Field(default_factory=list, description="Fields to search (all when empty)")
    options: SearchOptions = Field(default_factory=SearchOptions)
    limit: int | None = Field(default=None, ge=1, le=100)
    strict: bool | None = Field(default=None, description="Reject invalid queries with 400")


class SearchResultItem(BaseModel):
    """Single search result."""

    id: int | str
    fields: dict[str, Any]
    score: float
    strategies: list[str]
    matched_fields: list[str]


class SearchResponse(BaseModel):
    """Search response."""

    query: str
    results: list[SearchResultItem]
    total: int


@router.post("", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    engine: CollegeSearchEngine = Depends(get_search_engine),
    corpus: CorpusSnapshot = Depends(get_corpus),
):
    """
    Search the college catalog.

    - **query**: Search text (supports * and ? with the wildcard option)
    - **fields**: Restrict matching to these fields
    - **options**: Strategy switches (fuzzy, phonetic, location, ...)
    - **limit**: Maximum results (1-100)
    - **strict**: Return 400 for invalid queries instead of no results
    """
    settings = get_settings()
    strict = settings.search_strict_validation if request.strict is None else request.strict
    limit = request.limit or settings.search_default_limit

    ranked = await engine.search(
        request.query,
        corpus.records,
        fields=request.fields,
        options=request.options,
        strict=strict,
    )

    results = [
        SearchResultItem(
            id=result.record.id,
            fields=dict(result.record.fields),
            score=result.composite_score,
            strategies=[s.value for s in result.matched_strategies],
            matched_fields=list(result.matched_fields),
        )
        for result in ranked[:limit]
    ]

    return SearchResponse(query=request.query, results=results, total=len(ranked))


@router.delete("/cache")
async def clear_cache(
    engine: CollegeSearchEngine = Depends(get_search_engine),
) -> dict[str, int]:
    """Drop every cached search result."""
    return {"cleared": await engine.clear_cache()}


@router.get("/stats")
async def search_stats(
    engine: CollegeSearchEngine = Depends(get_search_engine),
    corpus: CorpusSnapshot = Depends(get_corpus),
) -> dict[str, Any]:
    """Cache statistics, strategy failures and corpus size."""
    return {**engine.stats(), "corpus_size": len(corpus)}


@router.post("/reload")
async def reload(
    repo: CollegeRepository = Depends(get_repository),
    engine: CollegeSearchEngine = Depends(get_search_engine),
    corpus: CorpusSnapshot = Depends(get_corpus),
) -> dict[str, int]:
    """Reload the corpus from the catalog and clear the cache."""
    return await reload_corpus(repo, corpus, engine)
