"""
Phonetic codes - Soundex and a compact Metaphone for name matching.

Both functions ignore anything that is not an ASCII letter and return ""
when nothing is left to encode.
"""

from __future__ import annotations

import re

__all__ = ["soundex", "metaphone", "phonetic_codes"]

_NON_ALPHA = re.compile(r"[^a-z]")

_SOUNDEX_CODES = {
    **dict.fromkeys("bfpv", "1"),
    **dict.fromkeys("cgjkqsxz", "2"),
    **dict.fromkeys("dt", "3"),
    "l": "4",
    **dict.fromkeys("mn", "5"),
    "r": "6",
}

_VOWELS = frozenset("aeiou")
_FRONT_VOWELS = frozenset("eiy")
_SILENT_INITIALS = ("kn", "gn", "pn", "ae", "wr")


def soundex(word: str) -> str:
    """
    American Soundex code.

    >>> soundex("Robert"), soundex("Rupert"), soundex("Ashcraft")
    ('R163', 'R163', 'A261')
    """
    letters = _NON_ALPHA.sub("", word.lower())
    if not letters:
        return ""

    first = letters[0]
    code = [first.upper()]
    previous = _SOUNDEX_CODES.get(first, "")

    for ch in letters[1:]:
        # h and w do not separate letters with the same code
        if ch in "hw":
            continue
        digit = _SOUNDEX_CODES.get(ch, "")
        if digit and digit != previous:
            code.append(digit)
            if len(code) == 4:
                break
        previous = digit

    return "".join(code).ljust(4, "0")


def metaphone(word: str) -> str:
    """
    Simplified Metaphone key.

    >>> metaphone("bangalore") == metaphone("bangalor")
    True
    """
    w = _NON_ALPHA.sub("", word.lower())
    if not w:
        return ""

    if w.startswith(_SILENT_INITIALS):
        w = w[1:]
    elif w.startswith("x"):
        w = "s" + w[1:]
    elif w.startswith("wh"):
        w = "w" + w[2:]

    out: list[str] = []
    n = len(w)

    for i, ch in enumerate(w):
        prev = w[i - 1] if i > 0 else ""
        nxt = w[i + 1] if i + 1 < n else ""
        after = w[i + 2] if i + 2 < n else ""

        if ch == prev and ch != "c":
            continue

        if ch in _VOWELS:
            if i == 0:
                out.append(ch)
        elif ch == "b":
            if not (prev == "m" and i == n - 1):
                out.append("b")
        elif ch == "c":
            if nxt == "h":
                out.append("k" if prev == "s" else "x")
            elif nxt == "i" and after == "a":
                out.append("x")
            elif nxt in _FRONT_VOWELS:
                if prev != "s":
                    out.append("s")
            else:
                out.append("k")
        elif ch == "d":
            if nxt == "g" and after in _FRONT_VOWELS:
                out.append("j")
            else:
                out.append("t")
        elif ch == "g":
            if nxt == "h" and after and after not in _VOWELS:
                continue
            if nxt == "n" and (i + 2 == n or w[i + 2 :] == "ed"):
                continue
            if prev == "d" and nxt in _FRONT_VOWELS:
                continue
            out.append("j" if nxt in _FRONT_VOWELS else "k")
        elif ch == "h":
            if nxt in _VOWELS and (not prev or prev not in "cgpst"):
                out.append("h")
        elif ch == "k":
            if prev != "c":
                out.append("k")
        elif ch == "p":
            out.append("f" if nxt == "h" else "p")
        elif ch == "q":
            out.append("k")
        elif ch == "s":
            if nxt == "h" or (nxt == "i" and after in ("o", "a")):
                out.append("x")
            else:
                out.append("s")
        elif ch == "t":
            if nxt == "i" and after in ("o", "a"):
                out.append("x")
            elif nxt == "h":
                out.append("0")
            elif not (nxt == "c" and after == "h"):
                out.append("t")
        elif ch == "v":
            out.append("f")
        elif ch in "wy":
            if nxt in _VOWELS:
                out.append(ch)
        elif ch == "x":
            out.append("ks")
        elif ch == "z":
            out.append("s")
        else:
            out.append(ch)

    return "".join(out).upper()


def phonetic_codes(word: str) -> tuple[str, str]:
    """(soundex, metaphone) pair for a single token."""
    return soundex(word), metaphone(word)
