from .image_stats import load_pil, pixel_statistics
from .schema import InvalidImageError, OcrEngineError, OcrResult, OcrWord
from .tesseract_engine import configure_tesseract, run_tesseract

__all__ = [
    "load_pil",
    "pixel_statistics",
    "configure_tesseract",
    "run_tesseract",
    "InvalidImageError",
    "OcrEngineError",
    "OcrResult",
    "OcrWord",
]
