"""Casing heuristics that guess whether a token is a first name, a surname or an interest."""

import re
from collections.abc import Iterable
from typing import Protocol

from badgecheck.normalize import strip_accents

DEFAULT_INTEREST_KEYWORDS = (
    'golf',
    'tennis',
    'foot',
    'football',
    'lecture',
    'voyage',
    'cuisine',
    'musique',
    'running',
    'yoga',
    'cinema',
    'theatre',
    'peinture',
    'danse',
    'reading',
    'travel',
    'cooking',
    'music',
    'painting',
    'dance',
)

FIRST_NAME_ENDINGS = ('a', 'e', 'i', 'o', 'u', 'y', 'ie', 'ine', 'ette')

# Letters, apostrophes and hyphens only
_NAME_WORD_RE = re.compile(r"[^\W\d_](?:[^\W\d_]|['’\-])*")
_PART_SPLIT_RE = re.compile(r'[\s\-]+')


class NameClassifier(Protocol):
    """Pluggable heuristics for locale-specific name shapes."""

    def looks_like_first_name(self, token: str) -> bool:
        ...

    def looks_like_last_name(self, token: str) -> bool:
        ...

    def looks_like_interest(self, text: str) -> bool:
        ...

    def is_given_name_shape(self, text: str) -> bool:
        ...

    def is_surname_shape(self, text: str) -> bool:
        ...


def _is_capitalized(token: str) -> bool:
    """First letter upper case, at least one lower-case letter after it."""
    return token[:1].isupper() and any(ch.islower() for ch in token[1:])


def _uppercase_ratio(token: str) -> float:
    letters = [ch for ch in token if ch.isalpha()]
    if not letters:
        return 0.0
    return sum(1 for ch in letters if ch.isupper()) / len(letters)


class CasingClassifier:
    """Default classifier for French/English name lists.

    Args:
        interest_keywords: Hobby words that mark a free-text interest.
        max_first_name_length: Upper bound for a first-name token.
        max_given_shape_length: Upper bound used by the approximate fallback.
    """

    def __init__(
        self,
        interest_keywords: Iterable[str] = DEFAULT_INTEREST_KEYWORDS,
        max_first_name_length: int = 20,
        max_given_shape_length: int = 12,
    ) -> None:
        self.interest_keywords = tuple(strip_accents(k).lower() for k in interest_keywords)
        self.max_first_name_length = max_first_name_length
        self.max_given_shape_length = max_given_shape_length

    def looks_like_first_name(self, token: str) -> bool:
        if not 2 <= len(token) <= self.max_first_name_length:
            return False
        if not _NAME_WORD_RE.fullmatch(token) or not _is_capitalized(token):
            return False
        lower = strip_accents(token).lower()
        return lower.endswith(FIRST_NAME_ENDINGS)

    def looks_like_last_name(self, token: str) -> bool:
        letters = [ch for ch in token if ch.isalpha()]
        if len(letters) < 2:
            return False
        if _uppercase_ratio(token) >= 0.6:
            return True
        return _is_capitalized(token) and len(token) > 3 and not self.looks_like_first_name(token)

    def looks_like_interest(self, text: str) -> bool:
        """A hobby keyword, or a phrase with a lower-case word (``Voyage en Asie``)."""
        lower = strip_accents(text).lower()
        if any(keyword in lower for keyword in self.interest_keywords):
            return True
        words = text.split()
        return len(words) >= 2 and any(word[:1].islower() for word in words)

    def is_given_name_shape(self, text: str) -> bool:
        """Short, capitalized, vowel-ending single word (``Marie``, ``Chloé``)."""
        return (
            ' ' not in text
            and '-' not in text
            and len(text) <= self.max_given_shape_length
            and self.looks_like_first_name(text)
        )

    def is_surname_shape(self, text: str) -> bool:
        """All upper case, or several capitalized parts (``LE GOFF``, ``Saint-Exupéry``)."""
        letters = [ch for ch in text if ch.isalpha()]
        if len(letters) < 2:
            return False
        if all(ch.isupper() for ch in letters):
            return True
        parts = [part for part in _PART_SPLIT_RE.split(text) if part]
        return len(parts) >= 2 and all(part[:1].isupper() for part in parts)
