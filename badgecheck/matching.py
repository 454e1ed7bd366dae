"""Greedy one-pass matching of order entries against produced entries."""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Optional

from badgecheck import MatchResult, MatchStatus, MatchThresholds, PersonEntry
from badgecheck.normalize import comparison_form
from badgecheck.similarity import DAMERAU, JARO, similarity

log = logging.getLogger(__name__)

# Combined score above which an unmatched best candidate is reported as a typo
DEFAULT_TYPO_CUTOFF = 0.7

REASON_INVERSION = 'first and last names transposed'
REASON_TYPO = 'probable typo'
REASON_MISSING = 'no corresponding produced entry'
REASON_DUPLICATE = 'ordered more than once, produced once'


@dataclass(frozen=True)
class CandidateScore:
    """Similarities between one order entry and one produced entry."""

    index: int                    # position in the produced list
    entry: PersonEntry
    first_name: float
    last_name: float
    interest: Optional[float]     # None unless both sides carry an interest
    cross_first: float            # order first name vs candidate last name
    cross_last: float             # order last name vs candidate first name

    @property
    def combined(self) -> float:
        scores = [self.first_name, self.last_name]
        if self.interest is not None:
            scores.append(self.interest)
        return sum(scores) / len(scores)


def _has_interest(entry: PersonEntry) -> bool:
    return bool(entry.interest and entry.interest.strip())


def _compare(a: str, b: str, strip_accents: bool, algo: str = JARO) -> float:
    return similarity(comparison_form(a, strip_accents), comparison_form(b, strip_accents), algo)


def score_candidate(
    order: PersonEntry,
    candidate: PersonEntry,
    index: int,
    strip_accents: bool = True,
) -> CandidateScore:
    """Score one produced entry against one order entry.

    Names are compared with Jaro, interests with normalized
    Damerau-Levenshtein, and the cross (transposed) name scores are kept
    for inversion detection.

    Args:
        order: Entry from the order list.
        candidate: Entry from the produced list.
        index: Position of ``candidate`` in the produced list.
        strip_accents: Ignore diacritics when comparing.

    Returns:
        CandidateScore with all similarities.
    """
    interest = None
    if _has_interest(order) and _has_interest(candidate):
        interest = _compare(order.interest, candidate.interest, strip_accents, DAMERAU)

    return CandidateScore(
        index=index,
        entry=candidate,
        first_name=_compare(order.first_name, candidate.first_name, strip_accents),
        last_name=_compare(order.last_name, candidate.last_name, strip_accents),
        interest=interest,
        cross_first=_compare(order.first_name, candidate.last_name, strip_accents),
        cross_last=_compare(order.last_name, candidate.first_name, strip_accents),
    )


def is_inversion(score: CandidateScore, thresholds: MatchThresholds) -> bool:
    """Both transposed comparisons pass while both direct ones fail."""
    return (
        score.cross_first >= thresholds.last_name
        and score.cross_last >= thresholds.first_name
        and score.first_name < thresholds.first_name
        and score.last_name < thresholds.last_name
    )


def is_match(score: CandidateScore, thresholds: MatchThresholds) -> bool:
    """Every applicable field clears its threshold."""
    return (
        score.first_name >= thresholds.first_name
        and score.last_name >= thresholds.last_name
        and (score.interest is None or score.interest >= thresholds.interest)
    )


class MatchSession:
    """One matching run; owns the set of consumed produced entries.

    Order entries are processed strictly in their original order and a
    consumed produced entry is never reassigned, so an earlier order entry
    can take the best candidate of a later one.

    Args:
        thresholds: Per-field similarity cutoffs.
        strip_accents: Ignore diacritics when comparing.
        typo_cutoff: Combined score from which a near miss is a typo.
    """

    def __init__(
        self,
        thresholds: Optional[MatchThresholds] = None,
        strip_accents: bool = True,
        typo_cutoff: float = DEFAULT_TYPO_CUTOFF,
    ) -> None:
        self.thresholds = thresholds or MatchThresholds()
        self.strip_accents = strip_accents
        self.typo_cutoff = typo_cutoff
        self.consumed: set[int] = set()

    def best_candidate(
        self,
        order: PersonEntry,
        produced: list[PersonEntry],
    ) -> Optional[CandidateScore]:
        """Highest combined score among unconsumed entries; first one wins ties."""
        best: Optional[CandidateScore] = None
        for index, candidate in enumerate(produced):
            if index in self.consumed:
                continue
            score = score_candidate(order, candidate, index, self.strip_accents)
            if best is None or score.combined > best.combined:
                best = score
        return best

    def _name_key(self, entry: PersonEntry) -> tuple[str, str]:
        return (
            comparison_form(entry.first_name, self.strip_accents),
            comparison_form(entry.last_name, self.strip_accents),
        )

    def _consumed_twin(self, order: PersonEntry, produced: list[PersonEntry]) -> Optional[PersonEntry]:
        """An already consumed produced entry carrying exactly the same name."""
        key = self._name_key(order)
        for index in sorted(self.consumed):
            if self._name_key(produced[index]) == key:
                return produced[index]
        return None

    def classify(self, order: PersonEntry, position: int, produced: list[PersonEntry]) -> MatchResult:
        """Classify one order entry and consume its partner, if any."""
        result_id = f"{order.identity_hash}#{position}"
        best = self.best_candidate(order, produced)

        if best is not None:
            if is_inversion(best, self.thresholds):
                self.consumed.add(best.index)
                return MatchResult(
                    id=f"{result_id}-inversion",
                    status=MatchStatus.INVERSION,
                    score=(best.cross_first + best.cross_last) / 2,
                    order_entry=order,
                    produced_entry=best.entry,
                    suggestion=best.entry.full_name,
                    reasons=[REASON_INVERSION],
                )

            if is_match(best, self.thresholds):
                self.consumed.add(best.index)
                return MatchResult(
                    id=f"{result_id}-match",
                    status=MatchStatus.MATCH,
                    score=best.combined,
                    order_entry=order,
                    produced_entry=best.entry,
                )

            if best.combined >= self.typo_cutoff:
                self.consumed.add(best.index)
                return MatchResult(
                    id=f"{result_id}-typo",
                    status=MatchStatus.TYPO,
                    score=best.combined,
                    order_entry=order,
                    produced_entry=best.entry,
                    suggestion=best.entry.full_name,
                    reasons=[REASON_TYPO],
                )

        twin = self._consumed_twin(order, produced)
        if twin is not None:
            return MatchResult(
                id=f"{result_id}-duplicate",
                status=MatchStatus.DUPLICATE,
                score=1.0,
                order_entry=order,
                reasons=[REASON_DUPLICATE],
            )

        return MatchResult(
            id=f"{result_id}-missing",
            status=MatchStatus.MISSING,
            score=best.combined if best is not None else 0.0,
            order_entry=order,
            reasons=[REASON_MISSING],
        )

    def run(self, order: list[PersonEntry], produced: list[PersonEntry]) -> list[MatchResult]:
        """Match every order entry, then report unconsumed produced entries as extra.

        Args:
            order: Entries that were ordered, in original order.
            produced: Entries that were produced, in original order.

        Returns:
            One result per order entry (in order), followed by one ``extra``
            result per produced entry that was never consumed.
        """
        results = [self.classify(entry, position, produced) for position, entry in enumerate(order)]

        for index, entry in enumerate(produced):
            if index in self.consumed:
                continue
            results.append(MatchResult(
                id=f"{entry.identity_hash}#p{index}-extra",
                status=MatchStatus.EXTRA,
                score=0.0,
                produced_entry=entry,
            ))

        counts = Counter(result.status.value for result in results)
        log.info(
            "Matching finished: %d order entries, %d produced entries, %s",
            len(order), len(produced), dict(sorted(counts.items())),
        )
        return results


def match_entries(
    order: list[PersonEntry],
    produced: list[PersonEntry],
    thresholds: Optional[MatchThresholds] = None,
    strip_accents: bool = True,
    typo_cutoff: float = DEFAULT_TYPO_CUTOFF,
) -> list[MatchResult]:
    """Match two entry lists in a fresh :class:`MatchSession`."""
    session = MatchSession(thresholds, strip_accents, typo_cutoff)
    return session.run(order, produced)
