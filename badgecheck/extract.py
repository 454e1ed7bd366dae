"""Turn loosely structured text lines into (first name, last name) records."""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Optional

from badgecheck import PersonEntry
from badgecheck.classify import CasingClassifier, NameClassifier
from badgecheck.normalize import header_tokens, normalize_token

log = logging.getLogger(__name__)

NO_DATA_WARNING = "no usable tabular data found"
APPROXIMATE_WARNING = (
    "first/last name columns not detected: approximate extraction from isolated names"
)

DEFAULT_HONORIFICS = (
    'm', 'm.', 'mr', 'mme', 'mlle', 'monsieur', 'madame', 'maitre', 'maître',
    'dr', 'docteur', 'mrs', 'ms', 'miss', 'mister', 'sir', 'prof',
)

DEFAULT_BANNED_TOKENS = (
    'adresse', 'amalgame', 'badge', 'badges', 'bon de commande', 'civilite',
    'commande', 'compagnie', 'contact', 'coquilles', 'correspondants', 'date',
    'email', 'entreprise', 'facturation', 'facture', 'fonction', 'liste',
    'livraison', 'manquants', 'montant', 'ocr', 'option', 'page', 'passion',
    'portable', 'prenom', 'prenoms', 'nom', 'noms', 'prix', 'quantite',
    'quantites', 'rapport', 'reference', 'societe', 'status', 'telephone',
    'total', 'ttc', 'ville',
    'address', 'amount', 'company', 'first name', 'last name', 'firstname',
    'lastname', 'surname', 'interest', 'invoice', 'phone', 'price', 'quantity',
    'report', 'subtotal',
)

DEFAULT_SKIP_KEYWORDS = (
    'rapport', 'checkbadges', 'ocr', 'date', 'correspondants', 'manquants',
    'coquilles', 'inversions', 'montant', 'total', 'facture', 'facturation',
    'livraison', 'adresse', 'bon de commande', 'bondecommande', 'reference',
    'contact',
    'report', 'invoice', 'delivery', 'address', 'amount', 'subtotal',
    'order form',
)

DEFAULT_FIRST_NAME_MARKERS = ('prenom', 'prenoms', 'first', 'firstname', 'given', 'forename')
DEFAULT_LAST_NAME_MARKERS = ('nom', 'noms', 'last', 'lastname', 'surname', 'family', 'familyname')
DEFAULT_INTEREST_MARKERS = ('passion', 'passions', 'interest', 'interests', 'hobby', 'hobbies')

# "3.", "12) ", "4e ", "1er -"
_ORDINAL_RE = re.compile(r'^\d+\s*(?:(?:er|re|e|st|nd|rd|th)\b)?\s*[.)\-:°]*\s*', re.IGNORECASE)
_COLUMN_SPLIT_RE = re.compile(r'\s{2,}|[;,\t|]')
_PAGE_COUNTER_RE = re.compile(r'^(?:page\s*\d+|(?:page\s*)?\d+\s*(?:/|sur|of)\s*\d+)\b', re.IGNORECASE)
_LETTER_RE = re.compile(r'[^\W\d_]')
_DIGIT_RE = re.compile(r'\d')
_EDGE_JUNK_RE = re.compile(r"^(?:[^\w'’\-]|[\d_])+|(?:[^\w'’\-]|[\d_])+$")
_SPACES_RE = re.compile(r'\s+')


def _token_set(values: Iterable[str]) -> frozenset[str]:
    return frozenset(token for token in (normalize_token(v) for v in values) if token)


def _phrases(values: Iterable[str]) -> tuple[tuple[str, ...], ...]:
    return tuple(tuple(header_tokens(v)) for v in values if header_tokens(v))


@dataclass
class ExtractorVocabulary:
    """Keyword lists that drive the extraction heuristics.

    Every value is compared in normalized form (accents stripped, lower
    case, separators removed), so ``'Maître'`` and ``'maitre'`` are the
    same entry.
    """

    honorifics: Sequence[str] = DEFAULT_HONORIFICS
    banned_tokens: Sequence[str] = DEFAULT_BANNED_TOKENS
    skip_keywords: Sequence[str] = DEFAULT_SKIP_KEYWORDS
    first_name_markers: Sequence[str] = DEFAULT_FIRST_NAME_MARKERS
    last_name_markers: Sequence[str] = DEFAULT_LAST_NAME_MARKERS
    interest_markers: Sequence[str] = DEFAULT_INTEREST_MARKERS

    def __post_init__(self) -> None:
        self._honorifics = _token_set(self.honorifics)
        self._banned = _token_set(self.banned_tokens)
        self._skip_phrases = _phrases(self.skip_keywords)
        self._first_markers = _token_set(self.first_name_markers)
        self._last_markers = _token_set(self.last_name_markers)
        self._interest_markers = _token_set(self.interest_markers)

    def is_honorific(self, token: str) -> bool:
        return normalize_token(token) in self._honorifics

    def is_banned(self, token: str) -> bool:
        return normalize_token(token) in self._banned

    def marker_kind(self, text: str) -> Optional[str]:
        """Return ``'first'``, ``'last'`` or ``'interest'`` if ``text`` names a column."""
        tokens = header_tokens(text)
        if any(t in self._first_markers for t in tokens):
            return 'first'
        if any(t in self._last_markers for t in tokens):
            return 'last'
        if any(t in self._interest_markers for t in tokens):
            return 'interest'
        return None

    def is_column_label(self, text: str) -> bool:
        """True for a bare column title such as ``Prénom`` or ``Nom de famille``."""
        return self.is_banned(text) or self.marker_kind(text) is not None

    def has_name_markers(self, line: str) -> bool:
        """True if the line mentions both a first-name and a last-name column."""
        tokens = header_tokens(line)
        return (
            any(t in self._first_markers for t in tokens)
            and any(t in self._last_markers for t in tokens)
        )

    def contains_skip_keyword(self, line: str) -> bool:
        tokens = header_tokens(line)
        for phrase in self._skip_phrases:
            size = len(phrase)
            for start in range(len(tokens) - size + 1):
                if tuple(tokens[start:start + size]) == phrase:
                    return True
        return False


@dataclass(frozen=True)
class ColumnHints:
    """Column positions read from a header line."""

    first_name: int
    last_name: int
    interest: Optional[int] = None


@dataclass
class ExtractionOutcome:
    """Records and warnings produced from one document's lines."""

    entries: list[PersonEntry] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    header_index: Optional[int] = None
    hints: Optional[ColumnHints] = None
    approximate: bool = False


def strip_ordinal(line: str) -> str:
    """Remove a leading index such as ``'3.'``, ``'12)'`` or ``'4e'``."""
    return _ORDINAL_RE.sub('', line, count=1).strip()


def split_fields(line: str) -> tuple[list[str], bool]:
    """Split a line into columns.

    Wide gaps and common delimiters are tried first; with fewer than two
    non-empty fields the line is split on single whitespace instead.

    Returns:
        (fields, True if the split used column separators)
    """
    parts = [part.strip() for part in _COLUMN_SPLIT_RE.split(line)]
    parts = [part for part in parts if part]
    if len(parts) >= 2:
        return parts, True
    return line.split(), False


def clean_name_token(token: str) -> str:
    """Trim everything but letters, apostrophes and hyphens from both ends."""
    return _SPACES_RE.sub(' ', _EDGE_JUNK_RE.sub('', token)).strip()


class NameFieldExtractor:
    """Map raw lines to person records.

    Args:
        vocabulary: Keyword lists (honorifics, noise words, column markers).
        classifier: Casing heuristics used by the approximate fallback.
        min_fallback_records: Minimum yield for the fallback to be accepted.
    """

    def __init__(
        self,
        vocabulary: Optional[ExtractorVocabulary] = None,
        classifier: Optional[NameClassifier] = None,
        min_fallback_records: int = 3,
    ) -> None:
        self.vocabulary = vocabulary or ExtractorVocabulary()
        self.classifier = classifier or CasingClassifier()
        self.min_fallback_records = min_fallback_records

    def is_likely_name(self, value: str) -> bool:
        """A name field has a letter, no digit, and is not a noise word."""
        if not value or not _LETTER_RE.search(value) or _DIGIT_RE.search(value):
            return False
        normalized = normalize_token(value)
        if len(normalized) < 2:
            return False
        return not self.vocabulary.is_banned(value)

    def is_boilerplate(self, line: str) -> bool:
        """Report titles, page counters, totals... unless the line is a header."""
        if self.vocabulary.has_name_markers(line):
            return False
        if _PAGE_COUNTER_RE.match(line.strip()):
            return True
        return self.vocabulary.contains_skip_keyword(line)

    def find_header(self, lines: Sequence[str]) -> tuple[Optional[int], Optional[ColumnHints]]:
        """Locate the header line and read the column positions it declares.

        Returns:
            (header index or None, hints or None)
        """
        for index, line in enumerate(lines):
            if not self.vocabulary.has_name_markers(line):
                continue
            fields, _ = split_fields(line)
            positions: dict[str, int] = {}
            for position, value in enumerate(fields):
                kind = self.vocabulary.marker_kind(value)
                if kind and kind not in positions:
                    positions[kind] = position
            hints = None
            if 'first' in positions and 'last' in positions:
                hints = ColumnHints(
                    first_name=positions['first'],
                    last_name=positions['last'],
                    interest=positions.get('interest'),
                )
            log.debug("Header found at line %d: %r (hints=%s)", index + 1, line, hints)
            return index, hints
        return None, None

    def _strip_honorifics(self, words: list[str]) -> list[str]:
        while words and self.vocabulary.is_honorific(words[0]):
            words = words[1:]
        return words

    def parse_line(
        self,
        line: str,
        hints: Optional[ColumnHints] = None,
    ) -> Optional[tuple[str, str, Optional[str]]]:
        """Parse one line into (first name, last name, interest).

        Args:
            line: Raw text line.
            hints: Column positions from a header, if one was found.

        Returns:
            The parsed triple, or None if the line holds no valid name.
        """
        sanitized = line.strip()
        if not sanitized or not _LETTER_RE.search(sanitized):
            return None
        sanitized = strip_ordinal(sanitized)
        if not sanitized:
            return None

        fields, _ = split_fields(sanitized)

        if hints and max(hints.first_name, hints.last_name) < len(fields):
            first_words = self._strip_honorifics(fields[hints.first_name].split())
            first = clean_name_token(' '.join(first_words))
            last = clean_name_token(fields[hints.last_name])
            interest = None
            if hints.interest is not None and hints.interest < len(fields):
                interest = fields[hints.interest].strip() or None
            if self.is_likely_name(first) and self.is_likely_name(last):
                return first, last, interest
            return None

        tokens = [clean_name_token(value) for value in fields]
        tokens = [token for token in tokens if token and _LETTER_RE.search(token)]
        tokens = self._strip_honorifics(tokens)
        while tokens and self.vocabulary.is_banned(tokens[-1]):
            tokens.pop()

        if not 2 <= len(tokens) <= 6:
            return None

        first = tokens[0]
        last = ' '.join(tokens[1:])
        if not self.is_likely_name(first) or not self.is_likely_name(last):
            return None
        return first, last, None

    def fallback_entries(self, lines: Sequence[str], source: str) -> list[PersonEntry]:
        """Pair isolated name tokens by their casing.

        A surname-shaped token next to a given-name-shaped token (in either
        order) forms a record; anything that does not pair is dropped.
        """
        candidates: list[tuple[Optional[str], str, int]] = []
        for index, line in enumerate(lines):
            kind: Optional[str] = None
            value = clean_name_token(strip_ordinal(line))
            if (
                not self.is_boilerplate(line)
                and len(value.split()) <= 3
                and self.is_likely_name(value)
            ):
                if self.classifier.is_surname_shape(value):
                    kind = 'last'
                elif self.classifier.is_given_name_shape(value):
                    kind = 'first'
            candidates.append((kind, value, index))

        entries: list[PersonEntry] = []
        position = 0
        while position < len(candidates) - 1:
            kind, value, index = candidates[position]
            next_kind, next_value, _ = candidates[position + 1]
            if kind and next_kind and kind != next_kind:
                first, last = (value, next_value) if kind == 'first' else (next_value, value)
                entries.append(PersonEntry.create(
                    first, last, source, line=index + 1, raw=f"{value} {next_value}",
                ))
                position += 2
                continue
            position += 1
        return entries

    def extract(self, lines: Sequence[str], source: str) -> ExtractionOutcome:
        """Extract person records from the lines of one document.

        Args:
            lines: Text lines in document order.
            source: Document identifier stored on each entry.

        Returns:
            ExtractionOutcome with entries (not yet de-duplicated) and warnings.
        """
        outcome = ExtractionOutcome()
        header_index, hints = self.find_header(lines)
        outcome.header_index = header_index
        outcome.hints = hints
        start = header_index + 1 if header_index is not None else 0

        for index in range(start, len(lines)):
            line = lines[index]
            if self.is_boilerplate(line):
                continue
            parsed = self.parse_line(line, hints)
            if parsed is None:
                continue
            first, last, interest = parsed
            outcome.entries.append(PersonEntry.create(
                first, last, source, interest=interest, line=index + 1, raw=line.strip(),
            ))

        if header_index is None and len(outcome.entries) < self.min_fallback_records:
            fallback = self.fallback_entries(lines, source)
            if len(fallback) >= self.min_fallback_records:
                log.info("%s: approximate extraction, %d pairs from isolated names", source, len(fallback))
                outcome.entries = fallback
                outcome.approximate = True
                outcome.warnings.append(APPROXIMATE_WARNING)

        if not outcome.entries:
            outcome.warnings.append(NO_DATA_WARNING)

        return outcome
