"""
API Dependencies - Dependency injection for FastAPI routes.

Provides singleton instances of the catalog, the corpus snapshot and the
search engine.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import lru_cache

from collegematch.adapters.sqlite import CollegeRepository
from collegematch.config import get_settings
from collegematch.domains.search import CollegeSearchEngine, SearchableRecord

logger = logging.getLogger(__name__)


class CorpusSnapshot:
    """Read-only corpus handed to searches; replaced wholesale on reload."""

    def __init__(self, records: Sequence[SearchableRecord] = ()) -> None:
        self._records: tuple[SearchableRecord, ...] = tuple(records)

    @property
    def records(self) -> tuple[SearchableRecord, ...]:
        return self._records

    def replace(self, records: Sequence[SearchableRecord]) -> int:
        self._records = tuple(records)
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)


@lru_cache
def get_repository() -> CollegeRepository:
    """Get college catalog singleton."""
    settings = get_settings()
    return CollegeRepository(settings.db_path)


@lru_cache
def get_search_engine() -> CollegeSearchEngine:
    """Get search engine singleton."""
    return CollegeSearchEngine.from_settings(get_settings())


@lru_cache
def get_corpus() -> CorpusSnapshot:
    """Get corpus snapshot singleton."""
    return CorpusSnapshot()


async def reload_corpus(
    repo: CollegeRepository,
    corpus: CorpusSnapshot,
    engine: CollegeSearchEngine,
) -> dict[str, int]:
    """Re-read the catalog into the snapshot and drop stale cached results."""
    records = await repo.list_records()
    loaded = corpus.replace(records)
    cleared = await engine.clear_cache()
    logger.info("Corpus reloaded: %d records, %d cache entries cleared", loaded, cleared)
    return {"records": loaded, "cleared": cleared}


async def init_services() -> None:
    """
    Initialize services on startup.

    This should be called from the FastAPI lifespan handler.
    """
    repo = get_repository()
    await repo.initialize()
    await reload_corpus(repo, get_corpus(), get_search_engine())


async def cleanup_services() -> None:
    """Cleanup services on shutdown."""
    repo = get_repository()
    await repo.close()
