"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    CacheCorruptionError,
    CatalogError,
    CollegeMatchError,
    ErrorCode,
    InvalidQueryError,
    StrategyFailure,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "CollegeMatchError",
    "InvalidQueryError",
    "StrategyFailure",
    "CacheCorruptionError",
    "CatalogError",
]
