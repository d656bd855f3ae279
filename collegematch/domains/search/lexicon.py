"""
Lexicon - Synonym and location-variation tables for query expansion.
"""

from __future__ import annotations

from functools import lru_cache

__all__ = ["SYNONYMS", "LOCATION_GROUPS", "LOCATION_SUFFIXES", "expand_synonyms", "expand_location"]

SYNONYMS: dict[str, tuple[str, ...]] = {
    # Degrees
    "mbbs": ("bachelor of medicine", "bachelor of surgery", "medical degree"),
    "md": ("doctor of medicine", "medical doctor"),
    "ms": ("master of surgery", "surgical degree"),
    "mds": ("master of dental surgery", "dental surgery"),
    "bds": ("bachelor of dental surgery", "dental degree"),
    "dnb": ("diplomate of national board", "national board"),
    # Institutions and ownership
    "aiims": ("all india institute of medical sciences",),
    "jipmer": ("jawaharlal institute of postgraduate medical education and research",),
    "govt": ("government", "gov"),
    "pvt": ("private",),
    "deemed": ("deemed university", "deemed to be university"),
    "medical": ("medicine", "clinical", "healthcare"),
    "college": ("university", "institute", "academy"),
    # Specialties
    "cardiology": ("cardiac", "heart"),
    "neurology": ("brain", "nervous system"),
    "orthopedics": ("ortho", "bone"),
    "pediatrics": ("paediatrics", "child"),
    "gynecology": ("gynaecology", "women health"),
    "dermatology": ("skin", "derma"),
    "psychiatry": ("mental health", "psychology"),
    "radiology": ("xray", "imaging"),
    "anesthesiology": ("anaesthesiology", "anaesthesia"),
}

# Each group lists every name a place is known by; any member expands to the rest.
LOCATION_GROUPS: tuple[tuple[str, ...], ...] = (
    ("delhi", "new delhi", "dilli", "delhi ncr", "ncr"),
    ("mumbai", "bombay", "greater mumbai"),
    ("kolkata", "calcutta", "greater kolkata"),
    ("chennai", "madras", "greater chennai"),
    ("bangalore", "bengaluru", "bangaluru", "greater bangalore"),
    ("hyderabad", "secunderabad", "greater hyderabad"),
    ("pune", "puna", "greater pune"),
    ("ahmedabad", "ahmedbad", "greater ahmedabad"),
    ("kanpur", "cawnpore"),
    ("visakhapatnam", "vizag"),
    ("vadodara", "baroda"),
    ("gurgaon", "gurugram"),
    ("mangalore", "mangaluru"),
    ("mysore", "mysuru"),
    ("hubli", "hubballi"),
    ("trivandrum", "thiruvananthapuram"),
    ("pondicherry", "puducherry"),
)

LOCATION_SUFFIXES: tuple[str, ...] = ("city", "town", "village", "district", "state")


@lru_cache(maxsize=1024)
def expand_synonyms(text: str) -> tuple[str, ...]:
    """
    Synonym expansions for a lowercased query, excluding the query itself.

    Whole-query matches, partial key matches and per-word matches all
    contribute, in that order.
    """
    expanded: dict[str, None] = {}

    for synonym in SYNONYMS.get(text, ()):
        expanded.setdefault(synonym, None)

    for key, synonyms in SYNONYMS.items():
        if len(key) > 2 and len(text) > 2 and (key in text or text in key):
            for synonym in synonyms:
                expanded.setdefault(synonym, None)

    for word in text.split():
        for synonym in SYNONYMS.get(word, ()):
            expanded.setdefault(synonym, None)

    expanded.pop(text, None)
    return tuple(expanded)


@lru_cache(maxsize=1024)
def expand_location(text: str) -> tuple[str, ...]:
    """Alternative names for a lowercased place name, excluding the name itself."""
    expanded: dict[str, None] = {}

    for group in LOCATION_GROUPS:
        if text in group:
            for name in group:
                expanded.setdefault(name, None)

    for suffix in LOCATION_SUFFIXES:
        expanded.setdefault(f"{text} {suffix}", None)

    expanded.pop(text, None)
    return tuple(expanded)
