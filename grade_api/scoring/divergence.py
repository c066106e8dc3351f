from __future__ import annotations

from typing import Optional, Set

import regex as re

# Returned when one side has nothing to compare.
NEUTRAL_SCORE = 50

# (minimum similarity, score), checked top-down
BANDS = (
    (0.70, 95),
    (0.50, 70),
    (0.30, 45),
    (0.15, 25),
)
FLOOR_SCORE = 10

_RX_NON_WORD = re.compile(r"[^a-z0-9\s]")
_RX_SPACES = re.compile(r"\s+")


def normalize_for_compare(text: str) -> str:
    t = (text or "").lower()
    t = _RX_NON_WORD.sub("", t)
    return _RX_SPACES.sub(" ", t).strip()


def word_set(text: str) -> Set[str]:
    norm = normalize_for_compare(text)
    return set(norm.split(" ")) if norm else set()


def jaccard(a: Set[str], b: Set[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def divergence_score(first: Optional[str], second: Optional[str]) -> int:
    """
    Agreement between two independent transcriptions of the same page.

    Two engines disagreeing on a document is evidence the source itself is
    damaged or ambiguous, whatever either engine reports as confidence.
    """
    if not (first or "").strip() or not (second or "").strip():
        return NEUTRAL_SCORE

    a = word_set(first or "")
    b = word_set(second or "")
    if not a or not b:
        return NEUTRAL_SCORE

    similarity = jaccard(a, b)
    for threshold, score in BANDS:
        if similarity >= threshold:
            return score
    return FLOOR_SCORE
