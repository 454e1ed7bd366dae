"""Core module for checkbadges."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from badgecheck.normalize import identity_hash

__version__ = '0.3.0'


class SingleColumnFormat(str, Enum):
    """Attribute held by a document that carries a single column only."""

    FIRST_NAMES = 'first_names'
    LAST_NAMES = 'last_names'
    INTERESTS = 'interests'


class MatchStatus(str, Enum):
    """Classification of a reconciled entry."""

    MATCH = 'match'
    MISSING = 'missing'
    EXTRA = 'extra'
    DUPLICATE = 'duplicate'
    TYPO = 'typo'
    INVERSION = 'inversion'


@dataclass(frozen=True)
class PersonEntry:
    """A person extracted from an order list or a produced-badges list."""

    first_name: str
    last_name: str
    interest: Optional[str]
    source: str
    identity_hash: str
    page: Optional[int] = None
    line: Optional[int] = None
    raw: Optional[str] = None

    @classmethod
    def create(
        cls,
        first_name: str,
        last_name: str,
        source: str,
        interest: Optional[str] = None,
        page: Optional[int] = None,
        line: Optional[int] = None,
        raw: Optional[str] = None,
    ) -> 'PersonEntry':
        """Build an entry and derive its identity hash."""
        return cls(
            first_name=first_name,
            last_name=last_name,
            interest=interest or None,
            source=source,
            identity_hash=identity_hash(first_name, last_name, interest),
            page=page,
            line=line,
            raw=raw,
        )

    @property
    def full_name(self) -> str:
        return ' '.join(part for part in (self.first_name, self.last_name) if part)


@dataclass
class ParsedDocument:
    """Outcome of ingesting one file."""

    source: str
    entries: list[PersonEntry] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    log: list[str] = field(default_factory=list)
    single_column_format: Optional[SingleColumnFormat] = None
    line_count: int = 0
    ocr_confidence: Optional[float] = None
    error: Optional[str] = None   # hard per-file error (OCR unavailable, cancelled, ...)


@dataclass(frozen=True)
class MatchThresholds:
    """Similarity cutoffs (0.0 – 1.0) used by the matcher."""

    first_name: float = 0.88
    last_name: float = 0.92
    interest: float = 0.85


@dataclass
class MatchResult:
    """Classification of one order-side or produced-side entry."""

    id: str
    status: MatchStatus
    score: float                  # 0.0 – 1.0
    order_entry: Optional[PersonEntry] = None
    produced_entry: Optional[PersonEntry] = None
    suggestion: Optional[str] = None
    reasons: list[str] = field(default_factory=list)
