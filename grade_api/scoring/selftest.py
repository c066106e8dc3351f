from __future__ import annotations

import logging
from typing import List

from .coherence import coherence_score
from .divergence import divergence_score
from .grader import grade
from .models import ChannelStats, PixelStatistics

logger = logging.getLogger("readgrade")


DEFAULT_SELFTEST_TEXTS: List[str] = [
    "",
    "ab ",
    "INVOICE No. 4471 issued to ACME Ltd on 12/03/2024 for EUR 1,250.00",
    "Th e q u ck br wn f x |||||||| jumps ~~~ ov er",
    "hELlo WoRlD tHiS iS a ScAnNeD pAgE",
    "€$£%@#&+= ()-/\\ ;:!? '\"",
]

_FLAT_PAGE = PixelStatistics(
    channels=(ChannelStats(mean=0.0, stdev=0.0, min=0.0, max=0.0),) * 3,
    width=0,
    height=0,
)


def run_scoring_selftest(texts: List[str] | None = None) -> None:
    """Smoke-test the scoring functions to catch broken patterns at startup.

    Only verifies that scoring does not raise and stays in range.
    """
    samples = texts or DEFAULT_SELFTEST_TEXTS
    for s in samples:
        for score in (coherence_score(s), divergence_score(s, samples[-1])):
            if not 0 <= score <= 100:
                raise RuntimeError(f"score out of range for {s!r}: {score}")
        grade(None, s, _FLAT_PAGE, second_text=s)

    grade(None, None, _FLAT_PAGE)
    logger.info("Scoring self-test passed (%d samples).", len(samples))
