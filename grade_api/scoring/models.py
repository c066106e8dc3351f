from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class ChannelStats:
    mean: float
    stdev: float
    min: float
    max: float


@dataclass(frozen=True)
class PixelStatistics:
    channels: Tuple[ChannelStats, ...]
    width: int
    height: int

    @property
    def rgb(self) -> Tuple[ChannelStats, ...]:
        # alpha (4th band) never counts towards legibility
        return self.channels[:3]


@dataclass(frozen=True)
class LegibilityResult:
    legibility_score: int
    contrast_score: int
    sharpness_score: int
    width: int
    height: int


@dataclass(frozen=True)
class GradeReport:
    composite_score: int
    breakdown: Dict[str, int]
    width: int
    height: int
    tesseract_text: Optional[str] = None
    degraded: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape returned by /api/grade."""
        out: Dict[str, Any] = {
            "compositeScore": self.composite_score,
            "breakdown": dict(self.breakdown),
            "meta": {"width": self.width, "height": self.height},
        }
        if self.tesseract_text is not None:
            out["tesseractText"] = self.tesseract_text
        if self.degraded:
            out["degraded"] = list(self.degraded)
        return out
