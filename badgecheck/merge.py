"""Detect single-column documents and merge parallel ones into full records.

Some providers export one workbook sheet per attribute: a file of first
names, a file of surnames, a file of interests. Each file is tagged with
the attribute it holds and the files are zipped by line position.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from typing import Optional

from badgecheck import ParsedDocument, PersonEntry, SingleColumnFormat
from badgecheck.classify import CasingClassifier, NameClassifier
from badgecheck.extract import ExtractorVocabulary

log = logging.getLogger(__name__)

NAME_MAJORITY = 0.6
INTEREST_MAJORITY = 0.5

# Tab, semicolon or wide gap: the line is a table row, not a single value
_TABLE_ROW_RE = re.compile(r'\t|;|\s{2,}')


def detect_single_column_format(
    lines: Sequence[str],
    classifier: Optional[NameClassifier] = None,
) -> Optional[SingleColumnFormat]:
    """Guess whether a document holds a single attribute column.

    Every line is scored: a one-word line counts towards interests when
    it is a hobby keyword and towards first names and/or surnames
    otherwise, a two-word "First Last" line adds half a point to
    both name categories, and any other multi-word line without an
    upper-case surname counts towards interests. Table rows (tab,
    semicolon or wide gap) score nothing. A category wins when its ratio
    exceeds the majority threshold and is strictly greater than both
    others.

    Args:
        lines: Text lines of the document.
        classifier: Casing heuristics (default CasingClassifier).

    Returns:
        The detected format, or None for a regular multi-column document.
    """
    classifier = classifier or CasingClassifier()
    tokens = [line.strip() for line in lines if line.strip()]
    if not tokens:
        return None

    first_score = 0.0
    last_score = 0.0
    interest_score = 0.0

    for token in tokens:
        if _TABLE_ROW_RE.search(token):
            continue
        pieces = token.split()
        if len(pieces) == 1:
            if classifier.looks_like_interest(token):
                interest_score += 1
                continue
            if classifier.looks_like_first_name(pieces[0]):
                first_score += 1
            if classifier.looks_like_last_name(pieces[0]):
                last_score += 1
            continue
        if len(pieces) == 2 and (
            classifier.looks_like_first_name(pieces[0])
            and classifier.looks_like_last_name(pieces[1])
        ):
            first_score += 0.5
            last_score += 0.5
        elif (
            not any(classifier.is_surname_shape(piece) for piece in pieces)
            and classifier.looks_like_interest(token)
        ):
            interest_score += 1

    total = len(tokens)
    first_ratio = first_score / total
    last_ratio = last_score / total
    interest_ratio = interest_score / total

    if first_ratio > NAME_MAJORITY and first_ratio > last_ratio and first_ratio > interest_ratio:
        return SingleColumnFormat.FIRST_NAMES
    if last_ratio > NAME_MAJORITY and last_ratio > first_ratio and last_ratio > interest_ratio:
        return SingleColumnFormat.LAST_NAMES
    if interest_ratio > INTEREST_MAJORITY and interest_ratio > first_ratio and interest_ratio > last_ratio:
        return SingleColumnFormat.INTERESTS
    return None


def single_column_entries(
    lines: Sequence[str],
    fmt: SingleColumnFormat,
    source: str,
    vocabulary: Optional[ExtractorVocabulary] = None,
) -> list[PersonEntry]:
    """Wrap each value line of a single-column document in an entry.

    Empty lines and column titles (``Prénom``, ``Nom``...) are dropped.
    Line numbers are kept so that parallel documents can be aligned.
    """
    vocabulary = vocabulary or ExtractorVocabulary()
    entries: list[PersonEntry] = []
    for index, line in enumerate(lines):
        value = line.strip()
        if not value or vocabulary.is_column_label(value):
            continue
        entries.append(PersonEntry.create(
            first_name=value if fmt is SingleColumnFormat.FIRST_NAMES else '',
            last_name=value if fmt is SingleColumnFormat.LAST_NAMES else '',
            interest=value if fmt is SingleColumnFormat.INTERESTS else None,
            source=source,
            line=index + 1,
            raw=value,
        ))
    return entries


def _column(documents: Iterable[ParsedDocument], fmt: SingleColumnFormat) -> list[PersonEntry]:
    entries = [
        entry
        for doc in documents
        if doc.single_column_format is fmt
        for entry in doc.entries
    ]
    return sorted(entries, key=lambda e: e.line or 0)


def merge_single_column(documents: Sequence[ParsedDocument]) -> list[PersonEntry]:
    """Zip single-column documents into full records by line position.

    Position i takes the i-th first name, the i-th surname and the i-th
    interest; an attribute whose column is shorter is left empty, and a
    position where every attribute is empty is dropped.

    Args:
        documents: Parsed documents of one logical list.

    Returns:
        Merged entries in position order.
    """
    first_names = _column(documents, SingleColumnFormat.FIRST_NAMES)
    last_names = _column(documents, SingleColumnFormat.LAST_NAMES)
    interests = _column(documents, SingleColumnFormat.INTERESTS)

    size = max(len(first_names), len(last_names), len(interests))
    merged: list[PersonEntry] = []
    for position in range(size):
        first = first_names[position] if position < len(first_names) else None
        last = last_names[position] if position < len(last_names) else None
        interest = interests[position] if position < len(interests) else None

        first_value = first.first_name if first else ''
        last_value = last.last_name if last else ''
        interest_value = interest.interest if interest else None
        if not first_value and not last_value and not interest_value:
            continue

        origin = first or last or interest
        merged.append(PersonEntry.create(
            first_value,
            last_value,
            origin.source,
            interest=interest_value,
            page=origin.page,
            line=origin.line,
            raw=' '.join(v for v in (first_value, last_value, interest_value) if v),
        ))

    if size:
        log.info(
            "Merged single-column documents: %d first names, %d surnames, %d interests -> %d entries",
            len(first_names), len(last_names), len(interests), len(merged),
        )
    return merged
