from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import regex as re

from .rounding import clamp_score

# Text too short to judge gets a flat low score.
MIN_TEXT_LENGTH = 5
SHORT_TEXT_SCORE = 10

# 1-2 letter words that are legitimate English, not scan fragments.
STOP_WORDS = re.compile(
    r"^(?:a|I|to|in|on|of|or|an|is|it|at|no|do|be|we|he|so|if|my|up)$",
    re.I,
)

# Anything outside letters, digits and everyday punctuation/currency is noise.
GARBAGE_CHAR = re.compile(r"[^a-zA-Z0-9.,;:!?'\"()\-/\\€$£%@#&+=\n\r\t]")

# Same character 5+ times in a row ("lllll", "|||||").
REPEAT_RUN = re.compile(r"(.)\1{4,}")

RX_LOWER = re.compile(r"[a-z]")
RX_UPPER = re.compile(r"[A-Z]")
RX_CAMEL_START = re.compile(r"^[A-Z][a-z]+[A-Z]")
RX_SPACES = re.compile(r"\s+")

WEIGHT_SHORT = 0.30
WEIGHT_GARBAGE = 0.35
WEIGHT_REPEAT = 0.15
WEIGHT_MIXED = 0.20


@dataclass(frozen=True)
class CoherenceSignals:
    word_count: int
    short_ratio: float
    garbage_ratio: float
    repeat_runs: int
    mixed_case_ratio: float


def _is_short_fragment(word: str) -> bool:
    return len(word) <= 2 and STOP_WORDS.match(word) is None


def _is_mixed_case(word: str) -> bool:
    # "hELlo", "InVoIcE"; CamelCase-ish starts ("McDonald") are fine
    return (
        len(word) > 3
        and RX_LOWER.search(word) is not None
        and RX_UPPER.search(word[1:]) is not None
        and RX_CAMEL_START.match(word) is None
    )


def coherence_signals(text: Optional[str]) -> Optional[CoherenceSignals]:
    """Raw damage signals, or None when the text is too short to judge."""
    if not text or len(text.strip()) < MIN_TEXT_LENGTH:
        return None

    words: List[str] = text.split()
    if not words:
        return None

    n = len(words)
    short = sum(1 for w in words if _is_short_fragment(w))

    clean = RX_SPACES.sub("", text)
    garbage = len(GARBAGE_CHAR.findall(clean))
    garbage_ratio = garbage / len(clean) if clean else 0.0

    repeats = sum(1 for _ in REPEAT_RUN.finditer(text))
    mixed = sum(1 for w in words if _is_mixed_case(w))

    return CoherenceSignals(
        word_count=n,
        short_ratio=short / n,
        garbage_ratio=garbage_ratio,
        repeat_runs=repeats,
        mixed_case_ratio=mixed / n,
    )


def _short_score(ratio: float) -> int:
    if ratio > 0.4:
        return 10
    if ratio > 0.25:
        return 30
    if ratio > 0.15:
        return 55
    if ratio > 0.05:
        return 80
    return 95


def _garbage_score(ratio: float) -> int:
    if ratio > 0.3:
        return 10
    if ratio > 0.15:
        return 35
    if ratio > 0.05:
        return 65
    return 95


def _repeat_score(count: int) -> int:
    if count > 5:
        return 20
    if count > 2:
        return 50
    if count > 0:
        return 80
    return 100


def _mixed_score(ratio: float) -> int:
    if ratio > 0.2:
        return 20
    if ratio > 0.1:
        return 50
    if ratio > 0.03:
        return 75
    return 95


def coherence_score(text: Optional[str]) -> int:
    """
    Lexical well-formedness of OCR output, 0-100.

    Wrinkled, stained or torn paper makes the engine break words into
    fragments, emit stray symbols, smear repeated glyphs and flip letter
    case mid-word. Each of those maps to a step score; the weighted sum is
    the coherence.
    """
    sig = coherence_signals(text)
    if sig is None:
        return SHORT_TEXT_SCORE

    return clamp_score(
        _short_score(sig.short_ratio) * WEIGHT_SHORT
        + _garbage_score(sig.garbage_ratio) * WEIGHT_GARBAGE
        + _repeat_score(sig.repeat_runs) * WEIGHT_REPEAT
        + _mixed_score(sig.mixed_case_ratio) * WEIGHT_MIXED
    )
