from .coherence import coherence_score, coherence_signals
from .divergence import divergence_score
from .grader import grade
from .legibility import legibility_score
from .models import ChannelStats, GradeReport, LegibilityResult, PixelStatistics

__all__ = [
    "coherence_score",
    "coherence_signals",
    "divergence_score",
    "grade",
    "legibility_score",
    "ChannelStats",
    "GradeReport",
    "LegibilityResult",
    "PixelStatistics",
]
