from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_csv(name: str, default_csv: str = "") -> List[str]:
    raw = os.getenv(name, default_csv)
    return [p.strip() for p in raw.split(",") if p.strip()]


def _get_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


DEFAULT_GLM_OCR_URL = "https://api.z.ai/api/paas/v4/layout_parsing"
DEFAULT_ENHANCE_URL = "https://api.moonshot.ai/v1/chat/completions"
DEFAULT_ENHANCE_MODEL = "moonshot-v1-128k-vision-preview"


@dataclass(frozen=True)
class Settings:
    # Admin dashboard shared secret (stats + debug log)
    admin_password: str

    # Remote layout-parsing OCR
    glm_ocr_api_key: str
    glm_ocr_url: str
    # legacy key name; only reported on the dashboard
    ocr_api_key: str
    ocr_timeout_seconds: float

    # Remote vision "enhancement"
    kimi_api_key: str
    enhance_url: str
    enhance_model: str
    enhance_timeout_seconds: float

    # Limits
    max_payload_bytes: int
    scan_history_limit: int
    debug_log_limit: int

    # Local OCR
    tesseract_lang: str
    tesseract_path: str

    # General
    cors_allow_origins: List[str]
    run_selftest: bool
    environment: str

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            admin_password=_get_str("ADMIN_PASSWORD"),
            glm_ocr_api_key=_get_str("GLM_OCR_API_KEY"),
            glm_ocr_url=_get_str("GLM_OCR_URL", DEFAULT_GLM_OCR_URL),
            ocr_api_key=_get_str("OCR_API_KEY"),
            ocr_timeout_seconds=_get_float("OCR_TIMEOUT_SECONDS", 60.0),
            kimi_api_key=_get_str("KIMI_API_KEY"),
            enhance_url=_get_str("ENHANCE_URL", DEFAULT_ENHANCE_URL),
            enhance_model=_get_str("ENHANCE_MODEL", DEFAULT_ENHANCE_MODEL),
            enhance_timeout_seconds=_get_float("ENHANCE_TIMEOUT_SECONDS", 120.0),
            max_payload_bytes=int(_get_float("MAX_PAYLOAD_MB", 20.0) * 1024 * 1024),
            scan_history_limit=max(1, _get_int("SCAN_HISTORY_LIMIT", 500)),
            debug_log_limit=max(1, _get_int("DEBUG_LOG_LIMIT", 200)),
            tesseract_lang=_get_str("TESSERACT_LANG", "eng") or "eng",
            tesseract_path=_get_str("TESSERACT_PATH"),
            cors_allow_origins=_get_csv("CORS_ALLOW_ORIGINS", "*"),
            run_selftest=_get_bool("RUN_SELFTEST", True),
            environment=_get_str("ENVIRONMENT") or _get_str("ENV") or "stage",
        )
