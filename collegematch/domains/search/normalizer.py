"""
Text Normalizer - Canonical forms for queries and record fields.

Every strategy compares normalized forms, so "A.J.", "a j" and "AJ" can be
matched against each other without per-strategy cleanup.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

__all__ = ["NormalizedForm", "EMPTY_FORM", "normalize", "abbreviation_variants"]

_WHITESPACE = re.compile(r"\s+")
# Glob characters survive folding so "*medical*" is never a plain substring query.
_PUNCTUATION = re.compile(r"[^\w\s*?]|_")
_SEPARATORS = re.compile(r"[\W_]+")
_GLOB_CHARS = frozenset("*?")


@dataclass(frozen=True, slots=True)
class NormalizedForm:
    """Canonical views of a piece of text."""

    raw: str
    text: str
    folded: str
    collapsed: str
    variants: tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not self.collapsed and not self.has_wildcard

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(self.folded.split())

    @property
    def has_wildcard(self) -> bool:
        return any(ch in _GLOB_CHARS for ch in self.text)


EMPTY_FORM = NormalizedForm(raw="", text="", folded="", collapsed="", variants=())


def _squash(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def abbreviation_variants(text: str) -> tuple[str, ...]:
    """
    Uppercase punctuation variants of an abbreviation.

    "A.J." -> ("A.J.", "A J", "AJ"); "a j" -> ("A J", "A.J", "AJ").
    """
    upper = _squash(text.upper())
    if not upper:
        return ()

    candidates = (
        upper,
        _squash(upper.replace(".", " ")),
        _WHITESPACE.sub(".", upper),
        re.sub(r"[.\s]", "", upper),
    )

    seen: dict[str, None] = {}
    for candidate in candidates:
        if candidate:
            seen.setdefault(candidate, None)
    return tuple(seen)


@lru_cache(maxsize=8192)
def _normalize_str(text: str) -> NormalizedForm:
    lowered = _squash(text.lower())
    if not lowered:
        return EMPTY_FORM

    return NormalizedForm(
        raw=text,
        text=lowered,
        folded=_squash(_PUNCTUATION.sub(" ", lowered)),
        collapsed=_SEPARATORS.sub("", lowered),
        variants=abbreviation_variants(text),
    )


def normalize(text: Any) -> NormalizedForm:
    """
    Normalize text for matching.

    Never raises: None and blank input give EMPTY_FORM, numbers are
    stringified, and anything else that is not a string is treated as empty.
    """
    if isinstance(text, bool) or text is None:
        return EMPTY_FORM
    if isinstance(text, (int, float)):
        text = str(text)
    if not isinstance(text, str):
        return EMPTY_FORM
    return _normalize_str(text)
