from __future__ import annotations

from typing import Iterable, List

from .models import LegibilityResult, PixelStatistics
from .rounding import clamp_score

# Contrast: spread between darkest and brightest pixel, averaged over RGB.
CONTRAST_HIGH = 180.0
CONTRAST_LOW = 50.0
CONTRAST_FLOOR = 15.0

# Sharpness proxy: channel standard deviation, averaged over RGB.
SHARPNESS_HIGH = 50.0
SHARPNESS_LOW = 8.0
SHARPNESS_FLOOR = 10.0


def _avg(values: Iterable[float]) -> float:
    vals: List[float] = [float(v) for v in values]
    if not vals:
        return 0.0
    return sum(vals) / len(vals)


def contrast_score(avg_range: float) -> float:
    if avg_range >= CONTRAST_HIGH:
        return 100.0
    if avg_range <= CONTRAST_LOW:
        return CONTRAST_FLOOR
    return CONTRAST_FLOOR + (100.0 - CONTRAST_FLOOR) * ((avg_range - CONTRAST_LOW) / (CONTRAST_HIGH - CONTRAST_LOW))


def sharpness_score(avg_stdev: float) -> float:
    if avg_stdev >= SHARPNESS_HIGH:
        return 100.0
    if avg_stdev <= SHARPNESS_LOW:
        return SHARPNESS_FLOOR
    return SHARPNESS_FLOOR + (100.0 - SHARPNESS_FLOOR) * ((avg_stdev - SHARPNESS_LOW) / (SHARPNESS_HIGH - SHARPNESS_LOW))


def legibility_score(stats: PixelStatistics) -> LegibilityResult:
    """
    Pixel-level readability proxy for a page.

    Washed out, water damaged or faded scans show a narrow value range;
    creased or blurry ones show a low channel deviation. Both are averaged
    over the RGB channels only.
    """
    rgb = stats.rgb
    avg_range = _avg(ch.max - ch.min for ch in rgb)
    avg_stdev = _avg(ch.stdev for ch in rgb)

    contrast = contrast_score(avg_range)
    sharp = sharpness_score(avg_stdev)

    return LegibilityResult(
        legibility_score=clamp_score(contrast * 0.5 + sharp * 0.5),
        contrast_score=clamp_score(contrast),
        sharpness_score=clamp_score(sharp),
        width=int(stats.width or 0),
        height=int(stats.height or 0),
    )
