from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

BBox = Tuple[int, int, int, int]  # x0,y0,x1,y1


@dataclass(frozen=True)
class OcrWord:
    text: str
    confidence: float  # 0-100
    bbox: BBox

    def to_dict(self) -> Dict[str, Any]:
        x0, y0, x1, y1 = self.bbox
        return {
            "text": self.text,
            "confidence": self.confidence,
            "bbox": {"x0": x0, "y0": y0, "x1": x1, "y1": y1},
        }


@dataclass(frozen=True)
class OcrResult:
    engine: str           # "tesseract" | future engines
    confidence: float     # mean word confidence, 0-100
    text: str
    words: List[OcrWord] = field(default_factory=list)


class OcrEngineError(RuntimeError):
    """The OCR engine could not produce a result for an image."""


class InvalidImageError(ValueError):
    """Image bytes could not be decoded."""
