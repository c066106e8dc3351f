"""Pytest configuration and fixtures for the grading API tests."""

import base64
import io
from dataclasses import replace

import pytest
from PIL import Image, ImageDraw

from grade_api.config import Settings
from grade_api.ocr import OcrEngineError, OcrResult, OcrWord
from grade_api.scoring import ChannelStats, PixelStatistics

CLEAN_TEXT = "The quick brown fox jumps over the lazy dog near the river bank"


def make_stats(range_: float, stdev: float, *, width: int = 800, height: int = 600) -> PixelStatistics:
    ch = ChannelStats(mean=128.0, stdev=stdev, min=0.0, max=range_)
    return PixelStatistics(channels=(ch, ch, ch), width=width, height=height)


def make_png(width: int = 60, height: int = 30) -> bytes:
    """White page with a black block: full range, plenty of deviation."""
    im = Image.new("RGB", (width, height), "white")
    draw = ImageDraw.Draw(im)
    draw.rectangle([0, 0, width // 2 - 1, height - 1], fill="black")
    buf = io.BytesIO()
    im.save(buf, format="PNG")
    return buf.getvalue()


def data_uri(image_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(image_bytes).decode("ascii")


def make_settings(**overrides) -> Settings:
    base = Settings(
        admin_password="",
        glm_ocr_api_key="",
        glm_ocr_url="https://ocr.test/layout_parsing",
        ocr_api_key="",
        ocr_timeout_seconds=5.0,
        kimi_api_key="",
        enhance_url="https://enhance.test/v1/chat/completions",
        enhance_model="vision-test",
        enhance_timeout_seconds=5.0,
        max_payload_bytes=20 * 1024 * 1024,
        scan_history_limit=500,
        debug_log_limit=200,
        tesseract_lang="eng",
        tesseract_path="",
        cors_allow_origins=["*"],
        run_selftest=False,
        environment="test",
    )
    return replace(base, **overrides)


class FakeEngine:
    """Stands in for Tesseract; records how often it was called."""

    def __init__(self, confidence: float = 88.0, text: str = CLEAN_TEXT) -> None:
        self.calls = 0
        self.result = OcrResult(
            engine="fake",
            confidence=confidence,
            text=text,
            words=[OcrWord(text=w, confidence=confidence, bbox=(i * 10, 0, i * 10 + 8, 12)) for i, w in enumerate(text.split())],
        )

    def __call__(self, img):
        self.calls += 1
        return self.result


def failing_engine(img):
    raise OcrEngineError("tesseract failed: not installed")


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def fake_engine():
    return FakeEngine()
