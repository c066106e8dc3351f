"""Tests for env-driven settings and the startup self-test."""

import logging

from grade_api.config import DEFAULT_ENHANCE_MODEL, DEFAULT_GLM_OCR_URL, Settings
from grade_api.scoring.selftest import run_scoring_selftest

ENV_KEYS = [
    "ADMIN_PASSWORD",
    "GLM_OCR_API_KEY",
    "GLM_OCR_URL",
    "OCR_API_KEY",
    "KIMI_API_KEY",
    "ENHANCE_MODEL",
    "MAX_PAYLOAD_MB",
    "SCAN_HISTORY_LIMIT",
    "RUN_SELFTEST",
    "ENVIRONMENT",
    "ENV",
    "CORS_ALLOW_ORIGINS",
    "ENHANCE_TIMEOUT_SECONDS",
    "TESSERACT_PATH",
]


def _clear(monkeypatch):
    for k in ENV_KEYS:
        monkeypatch.delenv(k, raising=False)


def test_defaults(monkeypatch):
    _clear(monkeypatch)
    s = Settings.from_env()
    assert s.admin_password == ""
    assert s.glm_ocr_url == DEFAULT_GLM_OCR_URL
    assert s.enhance_model == DEFAULT_ENHANCE_MODEL
    assert s.max_payload_bytes == 20 * 1024 * 1024
    assert s.scan_history_limit == 500
    assert s.enhance_timeout_seconds == 120.0
    assert s.cors_allow_origins == ["*"]
    assert s.run_selftest is True
    assert s.environment == "stage"
    assert s.tesseract_path == ""


def test_overrides(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("ADMIN_PASSWORD", "  s3cret ")
    monkeypatch.setenv("MAX_PAYLOAD_MB", "1")
    monkeypatch.setenv("SCAN_HISTORY_LIMIT", "0")
    monkeypatch.setenv("RUN_SELFTEST", "off")
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.test, https://b.test,")
    monkeypatch.setenv("TESSERACT_PATH", " C:\\Program Files\\Tesseract-OCR\\tesseract.exe ")
    s = Settings.from_env()
    assert s.admin_password == "s3cret"
    assert s.max_payload_bytes == 1024 * 1024
    assert s.scan_history_limit == 1
    assert s.run_selftest is False
    assert s.environment == "prod"
    assert s.cors_allow_origins == ["https://a.test", "https://b.test"]
    assert s.tesseract_path == r"C:\Program Files\Tesseract-OCR\tesseract.exe"


def test_bad_numbers_fall_back(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("ENHANCE_TIMEOUT_SECONDS", "soon")
    monkeypatch.setenv("SCAN_HISTORY_LIMIT", "lots")
    s = Settings.from_env()
    assert s.enhance_timeout_seconds == 120.0
    assert s.scan_history_limit == 500


def test_selftest_logs(caplog):
    with caplog.at_level(logging.INFO, logger="readgrade"):
        run_scoring_selftest()
    assert "Scoring self-test passed" in caplog.text
