from __future__ import annotations

import math


def round_half_up(x: float) -> int:
    # .5 always rounds up (Python's round() would go to even)
    return int(math.floor(x + 0.5))


def clamp_score(x: float) -> int:
    return max(0, min(100, round_half_up(x)))
