"""
Error Taxonomy - Consistent error codes across the application.

Usage:
    from collegematch.config.errors import ErrorCode, CollegeMatchError

    raise CollegeMatchError(ErrorCode.SEARCH_INVALID_QUERY, "Query too long")
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # Search errors
    SEARCH_INVALID_QUERY = "SEARCH_INVALID_QUERY"
    SEARCH_STRATEGY_FAILED = "SEARCH_STRATEGY_FAILED"
    SEARCH_CACHE_CORRUPTED = "SEARCH_CACHE_CORRUPTED"

    # Storage errors
    STORAGE_CONNECTION_FAILED = "STORAGE_CONNECTION_FAILED"
    STORAGE_READ_FAILED = "STORAGE_READ_FAILED"

    # Security errors
    SECURITY_RATE_LIMITED = "SECURITY_RATE_LIMITED"

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"


class CollegeMatchError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to API-friendly dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidQueryError(CollegeMatchError):
    """Query text is empty, too long, or fails the query policy."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.SEARCH_INVALID_QUERY, message, details)


class StrategyFailure(CollegeMatchError):
    """A matcher strategy could not process a record."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.SEARCH_STRATEGY_FAILED, message, details)


class CacheCorruptionError(CollegeMatchError):
    """Result cache bookkeeping is inconsistent."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.SEARCH_CACHE_CORRUPTED, message, details)


class CatalogError(CollegeMatchError):
    """Corpus source could not be read."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.STORAGE_READ_FAILED, message, details)
