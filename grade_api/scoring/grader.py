from __future__ import annotations

from typing import Dict, List, Optional

from .coherence import coherence_score
from .divergence import divergence_score
from .legibility import legibility_score
from .models import GradeReport, PixelStatistics
from .rounding import clamp_score, round_half_up

# Four-factor weighting; OCR readability dominates.
WEIGHT_OCR = 0.55
WEIGHT_COHERENCE = 0.15
WEIGHT_LEGIBILITY = 0.15
WEIGHT_CROSSCHECK = 0.15

# Image + confidence only (no transcription to analyse).
FALLBACK_WEIGHT_IMAGE = 0.4
FALLBACK_WEIGHT_OCR = 0.6

# No second opinion means no detectable disagreement.
NO_CROSSCHECK_SCORE = 100

# Substituted when the OCR engine produced no confidence at all.
FALLBACK_OCR_CONFIDENCE = 50.0


def weighted_composite(ocr: float, coherence: float, legibility: float, crosscheck: float) -> int:
    return clamp_score(
        ocr * WEIGHT_OCR
        + coherence * WEIGHT_COHERENCE
        + legibility * WEIGHT_LEGIBILITY
        + crosscheck * WEIGHT_CROSSCHECK
    )


def fallback_composite(legibility: float, ocr: float) -> int:
    return clamp_score(legibility * FALLBACK_WEIGHT_IMAGE + ocr * FALLBACK_WEIGHT_OCR)


def _clamp_confidence(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def grade(
    ocr_confidence: Optional[float],
    ocr_text: Optional[str],
    pixel_stats: PixelStatistics,
    second_text: Optional[str] = None,
    *,
    tesseract_text: Optional[str] = None,
) -> GradeReport:
    """
    Composite readability grade: "can I trust the OCR output of this document?"

    ocr_confidence=None marks a failed engine call; a neutral confidence is
    substituted and the report lists it under `degraded`. ocr_text=None means
    no transcription exists, in which case only image legibility and OCR
    confidence are weighed.
    """
    degraded: List[str] = []

    if ocr_confidence is None:
        ocr = FALLBACK_OCR_CONFIDENCE
        degraded.append("ocrConfidence")
    else:
        ocr = _clamp_confidence(ocr_confidence)

    leg = legibility_score(pixel_stats)
    breakdown: Dict[str, int] = {"ocrConfidence": round_half_up(ocr)}

    if ocr_text is None:
        degraded.append("textCoherence")
        composite = fallback_composite(leg.legibility_score, ocr)
        breakdown["legibility"] = leg.legibility_score
        breakdown["contrast"] = leg.contrast_score
        breakdown["sharpness"] = leg.sharpness_score
    else:
        coherence = coherence_score(ocr_text)
        # whitespace still counts as supplied and scores neutral
        has_second = bool(second_text)
        crosscheck = divergence_score(ocr_text, second_text) if has_second else NO_CROSSCHECK_SCORE

        composite = weighted_composite(ocr, coherence, leg.legibility_score, crosscheck)
        breakdown["textCoherence"] = coherence
        breakdown["legibility"] = leg.legibility_score
        if has_second:
            breakdown["crossCheck"] = crosscheck

    return GradeReport(
        composite_score=composite,
        breakdown=breakdown,
        width=leg.width,
        height=leg.height,
        tesseract_text=tesseract_text,
        degraded=tuple(degraded),
    )
