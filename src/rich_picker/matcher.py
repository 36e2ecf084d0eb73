"""Query matching for candidate lists.

Matching is case-insensitive and tiered: a prefix match beats a substring
match, which beats an in-order character subsequence. Rows with equal score
keep their original order. The functions here are pure so they can run on
every keystroke.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from .sources import Candidate

NEUTRAL_SCORE = 0
SCORE_FUZZY = 1
SCORE_SUBSTRING = 2
SCORE_PREFIX = 3


@dataclass(frozen=True)
class MatchResult:
    """One matched candidate.

    Attributes:
        candidate: The matched candidate.
        index: Position of the candidate in its source.
        score: Match tier, only comparable within one source.
        positions: Offsets in ``candidate.display`` that matched the query.
    """

    candidate: Candidate
    index: int
    score: int = NEUTRAL_SCORE
    positions: tuple[int, ...] = ()


def _fold(text: str) -> tuple[str, list[int]]:
    """Lowercase ``text`` and map each folded character back to its source offset.

    Some characters lowercase to more than one character (``"İ"``), so the
    folded string can be longer than ``text``.
    """
    chars: list[str] = []
    owners: list[int] = []
    for i, char in enumerate(text):
        lowered = char.lower()
        chars.append(lowered)
        owners.extend([i] * len(lowered))
    return "".join(chars), owners


def _source_positions(owners: list[int], folded: Iterable[int]) -> tuple[int, ...]:
    return tuple(dict.fromkeys(owners[i] for i in folded))


def match_text(text: str, query: str) -> tuple[int, tuple[int, ...]] | None:
    """Match a single string against a query.

    Returns:
        (score, positions), or None when the query does not match.
        Positions are offsets into ``text``.
    """
    if not query:
        return NEUTRAL_SCORE, ()

    haystack, owners = _fold(text)
    needle = query.lower()

    found = haystack.find(needle)
    if found >= 0:
        score = SCORE_PREFIX if found == 0 else SCORE_SUBSTRING
        return score, _source_positions(owners, range(found, found + len(needle)))

    folded: list[int] = []
    start = 0
    for char in needle:
        pos = haystack.find(char, start)
        if pos < 0:
            return None
        folded.append(pos)
        start = pos + 1
    return SCORE_FUZZY, _source_positions(owners, folded)


def filter_candidates(candidates: Sequence[Candidate], query: str) -> list[MatchResult]:
    """Filter and order candidates for a query.

    An empty query returns every candidate in its original order with the
    neutral score.
    """
    if not query:
        return [MatchResult(cand, i) for i, cand in enumerate(candidates)]

    results: list[MatchResult] = []
    for i, cand in enumerate(candidates):
        matched = match_text(cand.display, query)
        if matched is None:
            continue
        score, positions = matched
        results.append(MatchResult(cand, i, score, positions))

    # sort() is stable, so equal scores keep source order
    results.sort(key=lambda r: -r.score)
    return results
