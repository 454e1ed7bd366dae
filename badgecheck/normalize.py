"""Text canonicalization and identity hashing for person entries."""

import re
import unicodedata
from typing import Optional

_PUNCTUATION_CATEGORIES = ('P', 'S')
_WHITESPACE_RE = re.compile(r'\s+')
_NON_ALNUM_RE = re.compile(r'[^a-z0-9]+', re.IGNORECASE)

HASH_SEPARATOR = '|'


def strip_accents(text: str) -> str:
    """Remove combining diacritical marks after NFD decomposition.

    Args:
        text: Raw string.

    Returns:
        The string without accents, still decomposed.
    """
    decomposed = unicodedata.normalize('NFD', text)
    return ''.join(ch for ch in decomposed if unicodedata.category(ch) != 'Mn')


def _punctuation_to_space(text: str) -> str:
    """Replace every run of punctuation/symbol characters with one space."""
    out: list[str] = []
    in_run = False
    for ch in text:
        if unicodedata.category(ch)[0] in _PUNCTUATION_CATEGORIES:
            if not in_run:
                out.append(' ')
            in_run = True
        else:
            out.append(ch)
            in_run = False
    return ''.join(out)


def comparison_form(text: str, remove_accents: bool = True) -> str:
    """Canonical form used before any similarity metric runs.

    Punctuation becomes a space, whitespace collapses and case folds.
    Accents are only removed when ``remove_accents`` is set.

    Args:
        text: Raw string.
        remove_accents: Strip diacritics before comparing.

    Returns:
        Normalized string.
    """
    if not text:
        return ''
    value = unicodedata.normalize('NFD', text)
    if remove_accents:
        value = strip_accents(value)
    value = _punctuation_to_space(value)
    return _WHITESPACE_RE.sub(' ', value).strip().lower()


def normalize_name(text: str) -> str:
    """Normalize a name: accents stripped, punctuation to space, lowercase."""
    return comparison_form(text, remove_accents=True)


def identity_hash(first_name: str, last_name: str, interest: Optional[str] = None) -> str:
    """Compute the de-duplication key of an entry.

    The key only serves to drop repeated rows inside one document; it is
    never used to pair entries across the two lists.

    Args:
        first_name: First name as extracted.
        last_name: Last name as extracted.
        interest: Optional free-text interest.

    Returns:
        Normalized fields joined with ``|``.
    """
    parts = [normalize_name(first_name), normalize_name(last_name)]
    if interest:
        parts.append(normalize_name(interest))
    return HASH_SEPARATOR.join(parts)


def normalize_header(text: str) -> str:
    """Normalize a header cell: ``'Prénom / Nom'`` -> ``'prenom_nom'``."""
    value = _NON_ALNUM_RE.sub('_', strip_accents(text))
    return value.strip('_').lower()


def normalize_token(text: str) -> str:
    """Header form without separators: ``'Bon de commande'`` -> ``'bondecommande'``."""
    return normalize_header(text).replace('_', '')


def header_tokens(text: str) -> list[str]:
    """Split the header form of ``text`` into its tokens."""
    normalized = normalize_header(text)
    return [token for token in normalized.split('_') if token]
