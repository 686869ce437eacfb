"""Tolerant text matching used when verifying rendered error messages."""

from __future__ import annotations

import re
import string

_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_PERIOD_RE = re.compile(r"\.$")

# Words of this length or shorter are ignored by the keyword fallback.
MIN_KEYWORD_LENGTH = 2


def normalize(text: str) -> str:
    """Lower-case and collapse whitespace."""
    return _WHITESPACE_RE.sub(" ", text).strip().lower()


def strip_trailing_period(text: str) -> str:
    """Drop a single trailing period, if present."""
    return _TRAILING_PERIOD_RE.sub("", text.strip())


def keywords(text: str) -> list[str]:
    """Meaningful words of ``text``: lower-cased, edge punctuation removed, longer than two chars."""
    words = (w.strip(string.punctuation) for w in normalize(text).split(" "))
    return [w for w in words if len(w) > MIN_KEYWORD_LENGTH]


def contains_message(haystack: str, expected: str) -> bool:
    """True if ``haystack`` holds ``expected`` in full or holds all of its keywords.

    An expected message without any meaningful word only matches in full.
    """
    body = normalize(haystack)
    wanted = normalize(expected)
    if not wanted:
        return False
    if wanted in body:
        return True
    words = keywords(expected)
    return bool(words) and all(w in body for w in words)
