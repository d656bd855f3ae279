"""
Settings - Application configuration using Pydantic Settings.

Every key can be set from the environment or a .env file, e.g.
SEARCH_FUZZY_METRIC=edit or API_RATE_LIMIT_RPM=120.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Catalog storage
    data_dir: Path = Path("data")
    db_path: Path = Path("data/collegematch.db")

    # Query policy
    search_max_query_length: int = Field(default=100, ge=1)
    search_strict_validation: bool = False

    # Matching and ranking
    search_fuzzy_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    search_fuzzy_metric: Literal["positional", "edit"] = "positional"
    search_semantic_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    search_relevance_threshold: float = Field(default=0.1, ge=0.0, le=1.0)
    search_location_bonus: float = 10.0

    # Results
    search_cache_capacity: int = Field(default=100, ge=1)
    search_default_limit: int = Field(default=20, ge=1, le=100)

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    api_rate_limit_rpm: int = Field(default=60, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
