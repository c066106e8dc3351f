from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import re
from typing import Callable, Optional

from PIL import Image

from .ocr import InvalidImageError, OcrEngineError, OcrResult, load_pil, pixel_statistics, run_tesseract
from .scoring import GradeReport, grade

logger = logging.getLogger("readgrade")

OcrEngine = Callable[[Image.Image], OcrResult]

_RX_DATA_URI_PREFIX = re.compile(r"^data:[^;]+;base64,")


def decode_file_payload(file: str) -> bytes:
    """Accept a data URI or bare base64 string from the browser client."""
    b64 = _RX_DATA_URI_PREFIX.sub("", (file or "").strip(), count=1)
    try:
        return base64.b64decode(b64, validate=False)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError("Invalid base64 image data") from e


def _safe_ocr(engine: OcrEngine, img: Image.Image) -> Optional[OcrResult]:
    # any engine error degrades the grade; the score is always produced
    try:
        return engine(img)
    except OcrEngineError as e:
        logger.warning("OCR engine failed, grading with degraded inputs: %s", e)
        return None
    except Exception:
        logger.exception("OCR engine raised unexpectedly, grading with degraded inputs")
        return None


async def grade_image(
    image_bytes: bytes,
    *,
    second_text: Optional[str] = None,
    engine: OcrEngine = run_tesseract,
) -> GradeReport:
    """
    Run the local OCR engine and pixel statistics in parallel, then grade.

    An engine failure never aborts grading: the report falls back to a
    neutral confidence and is marked degraded. Undecodable images raise
    InvalidImageError.
    """
    img = load_pil(image_bytes)

    ocr, stats = await asyncio.gather(
        asyncio.to_thread(_safe_ocr, engine, img),
        asyncio.to_thread(pixel_statistics, img),
    )

    if ocr is None:
        return grade(None, None, stats, second_text=second_text)

    return grade(
        ocr.confidence,
        ocr.text,
        stats,
        second_text=second_text,
        tesseract_text=ocr.text,
    )
