"""
Query Policy - Validate raw search text before it reaches the matchers.

One allow-list pass decides which characters a query may contain. A short,
enumerated denylist catches injection shapes that are built only from
allowed characters (or that should be reported by name in the logs).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from collegematch.config.errors import InvalidQueryError

logger = logging.getLogger(__name__)

__all__ = ["DeniedPattern", "DENYLIST", "ALLOWED_CHARACTERS", "QueryPolicy"]

# Letters, digits, whitespace and the punctuation seen in college names,
# plus the two glob characters.
ALLOWED_CHARACTERS = re.compile(r"[\w\s\-&.'\"*?,()/]+")


@dataclass(frozen=True)
class DeniedPattern:
    """Named rejection rule."""

    name: str
    category: str
    pattern: re.Pattern[str]


def _rule(name: str, category: str, pattern: str) -> DeniedPattern:
    return DeniedPattern(name, category, re.compile(pattern, re.IGNORECASE))


DENYLIST: tuple[DeniedPattern, ...] = (
    _rule("script_tag", "xss", r"<\s*/?\s*script"),
    _rule("javascript_uri", "xss", r"\b(java|vb)script\s*:"),
    _rule("event_handler", "xss", r"\bon[a-z]+\s*="),
    _rule("html_entity", "xss", r"&#x?[0-9a-f]+;?"),
    _rule("percent_encoding", "encoding", r"%[0-9a-f]{2}"),
    _rule("union_select", "sql", r"\bunion\b(\s+all)?\s+select\b"),
    _rule("drop_table", "sql", r"\bdrop\s+(table|database)\b"),
    _rule("tautology", "sql", r"\b(or|and)\s+'?\d+'?\s*=\s*'?\d+'?"),
    _rule("sql_comment", "sql", r"--|/\*|\*/|;"),
)


class QueryPolicy:
    """
    Query validation rules.

    Example:
        >>> policy = QueryPolicy(max_length=100)
        >>> policy.validate("  A.J.   Institute ")
        'A.J. Institute'
    """

    def __init__(
        self,
        max_length: int = 100,
        denylist: tuple[DeniedPattern, ...] = DENYLIST,
    ) -> None:
        self.max_length = max_length
        self.denylist = denylist

    def validate(self, text: Any) -> str:
        """
        Validate and sanitize query text.

        Returns:
            Trimmed text with internal whitespace collapsed

        Raises:
            InvalidQueryError: Empty, too long, denylisted or disallowed characters
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidQueryError("Query is empty", details={"rule": "empty"})

        if len(text) > self.max_length:
            raise InvalidQueryError(
                f"Query too long. Maximum {self.max_length} characters allowed.",
                details={"rule": "max_length", "length": len(text), "max_length": self.max_length},
            )

        for rule in self.denylist:
            if rule.pattern.search(text):
                logger.warning(
                    "Query rejected by denylist rule=%s category=%s",
                    rule.name,
                    rule.category,
                )
                raise InvalidQueryError(
                    "Query contains a disallowed pattern",
                    details={"rule": rule.name, "category": rule.category},
                )

        if not ALLOWED_CHARACTERS.fullmatch(text):
            raise InvalidQueryError(
                "Only letters, digits, spaces and - & . ' \" * ? , ( ) / are allowed",
                details={"rule": "allowed_characters"},
            )

        return " ".join(text.split())

    def is_valid(self, text: Any) -> bool:
        """True when validate() would accept the text."""
        try:
            self.validate(text)
        except InvalidQueryError:
            return False
        return True
