# api_main.py
# FastAPI service for document readability grading
# - /api/grade: composite trust score for a scanned page
# - /api/confidence: per-word Tesseract confidence
# - /api/ocr, /api/enhance: proxies to the remote OCR / vision APIs
# - /api/admin/*: scan stats and client debug log (shared-secret protected)

from __future__ import annotations

import asyncio
import functools
import hmac
import json
import logging
import os
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .ocr import InvalidImageError, OcrEngineError, configure_tesseract, load_pil, run_tesseract
from .pipeline import OcrEngine, decode_file_payload, grade_image
from .remote import EnhancementClient, LayoutOcrClient, RemoteApiError
from .scoring.selftest import run_scoring_selftest
from .store import DebugLog, ScanStore

logger = logging.getLogger("readgrade")

M = TypeVar("M", bound=BaseModel)


# ---------- models ----------
class GradeRequest(BaseModel):
    file: Optional[str] = None
    ocrText: Optional[str] = None


class FileRequest(BaseModel):
    file: Optional[str] = None
    fileName: Optional[str] = None


class EnhanceRequest(BaseModel):
    image: Optional[str] = None
    extractedText: Optional[str] = None


# ---------- utils ----------
async def _read_body(request: Request, limit: int) -> bytes:
    too_large = HTTPException(status_code=413, detail=f"Payload too large (max {limit // (1024 * 1024)}MB)")
    try:
        declared = int(request.headers.get("content-length") or "0")
    except ValueError:
        declared = 0
    if declared > limit:
        raise too_large

    # chunked uploads carry no content-length; stop reading once over the limit
    buf = bytearray()
    async for chunk in request.stream():
        buf.extend(chunk)
        if len(buf) > limit:
            raise too_large
    return bytes(buf)


def _parse_body(raw: bytes, model: Type[M]) -> M:
    try:
        data = json.loads(raw.decode("utf-8") or "null")
    except (UnicodeDecodeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid JSON")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON")
    try:
        return model(**data)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid request body")


def _client_ip(request: Request) -> str:
    fwd = (request.headers.get("x-forwarded-for") or "").split(",")[0].strip()
    if fwd:
        return fwd
    return request.client.host if request.client else "unknown"


def _require_admin(request: Request) -> None:
    password = request.app.state.settings.admin_password
    if not password:
        raise HTTPException(status_code=500, detail="Admin not configured")

    # Authorization header preferred, ?key= kept for older dashboards
    auth = request.headers.get("authorization") or ""
    key = auth.replace("Bearer ", "", 1).strip() or (request.query_params.get("key") or "")

    if not hmac.compare_digest(key.encode("utf-8"), password.encode("utf-8")):
        raise HTTPException(status_code=401, detail="Unauthorized")


# ---------- app ----------
def create_app(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[OcrEngine] = None,
    layout_client: Optional[LayoutOcrClient] = None,
    enhance_client: Optional[EnhancementClient] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_tesseract(settings.tesseract_path)

    if settings.run_selftest:
        run_scoring_selftest()

    app = FastAPI(title="Readgrade API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins or ["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Per-app state; nothing lives in module globals.
    app.state.settings = settings
    app.state.scans = ScanStore(settings.scan_history_limit)
    app.state.debug_log = DebugLog(settings.debug_log_limit)
    app.state.engine = engine or functools.partial(run_tesseract, lang=settings.tesseract_lang)
    app.state.layout_client = layout_client or LayoutOcrClient(
        settings.glm_ocr_url,
        settings.glm_ocr_api_key,
        timeout_seconds=settings.ocr_timeout_seconds,
    )
    app.state.enhance_client = enhance_client or EnhancementClient(
        settings.enhance_url,
        settings.kimi_api_key,
        model=settings.enhance_model,
        timeout_seconds=settings.enhance_timeout_seconds,
    )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        body: Dict[str, Any] = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
        return JSONResponse(body, status_code=exc.status_code)

    @app.get("/")
    async def root():
        return {"service": "readgrade-api", "env": settings.environment, "ok": True}

    @app.get("/healthz")
    async def healthz():
        return {"ok": True, "env": settings.environment}

    @app.post("/api/grade")
    async def grade_document(request: Request):
        raw = await _read_body(request, settings.max_payload_bytes)
        payload = _parse_body(raw, GradeRequest)
        if not payload.file:
            raise HTTPException(status_code=400, detail="No file provided")

        try:
            image_bytes = decode_file_payload(payload.file)
            report = await grade_image(image_bytes, second_text=payload.ocrText, engine=request.app.state.engine)
        except InvalidImageError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception:
            logger.exception("Grade endpoint error")
            raise HTTPException(status_code=500, detail="Failed to analyze document quality")

        if report.degraded:
            logger.warning("Degraded grade (%s): %s", ",".join(report.degraded), report.composite_score)
        return report.to_dict()

    @app.post("/api/confidence")
    async def word_confidence(request: Request):
        raw = await _read_body(request, settings.max_payload_bytes)
        payload = _parse_body(raw, FileRequest)
        if not payload.file:
            raise HTTPException(status_code=400, detail="No file provided")

        try:
            img = load_pil(decode_file_payload(payload.file))
            result = await asyncio.to_thread(request.app.state.engine, img)
        except InvalidImageError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except OcrEngineError:
            logger.exception("Confidence endpoint error")
            raise HTTPException(status_code=500, detail="Failed to analyze confidence")

        return {"words": [w.to_dict() for w in result.words]}

    @app.post("/api/ocr")
    async def remote_ocr(request: Request):
        client: LayoutOcrClient = request.app.state.layout_client
        if not client.configured:
            raise HTTPException(status_code=500, detail="API key not configured")

        raw = await _read_body(request, settings.max_payload_bytes)
        payload = _parse_body(raw, FileRequest)
        if not payload.file:
            raise HTTPException(status_code=400, detail="No file provided")

        request.app.state.scans.record_scan(_client_ip(request), payload.fileName)

        try:
            return await client.parse(payload.file)
        except RemoteApiError as e:
            raise HTTPException(status_code=e.status_code, detail={"error": e.message, "details": e.details})
        except (httpx.HTTPError, ValueError) as e:
            raise HTTPException(status_code=500, detail={"error": "Server error", "details": str(e)})

    @app.post("/api/enhance")
    async def enhance(request: Request):
        client: EnhancementClient = request.app.state.enhance_client
        if not client.configured:
            raise HTTPException(status_code=500, detail="Enhancement API key not configured")

        raw = await _read_body(request, settings.max_payload_bytes)
        payload = _parse_body(raw, EnhanceRequest)
        if not payload.image or not payload.extractedText:
            raise HTTPException(status_code=400, detail="Missing image or extracted text")

        try:
            enhanced = await client.enhance(payload.image, payload.extractedText)
        except RemoteApiError as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)
        except (httpx.HTTPError, ValueError) as e:
            raise HTTPException(status_code=500, detail=f"Enhancement failed: {e}")

        if not enhanced:
            raise HTTPException(status_code=500, detail="No enhanced text returned")
        return {"enhanced": enhanced}

    @app.get("/api/admin/stats")
    async def admin_stats(request: Request):
        _require_admin(request)
        return {
            **request.app.state.scans.stats(),
            "apiKeySet": bool(settings.glm_ocr_api_key or settings.ocr_api_key),
        }

    # no auth on POST: it is diagnostic data from the browser client
    @app.post("/api/admin/debug")
    async def add_debug_log(request: Request):
        raw = await _read_body(request, settings.max_payload_bytes)
        try:
            body = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            raise HTTPException(status_code=400, detail="Invalid data")
        request.app.state.debug_log.add(body)
        return {"ok": True}

    @app.get("/api/admin/debug")
    async def get_debug_logs(request: Request):
        _require_admin(request)
        return request.app.state.debug_log.entries()

    return app


app = create_app()


# ---------- uvicorn entry ----------
if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8080"))
    uvicorn.run("grade_api.api_main:app", host="0.0.0.0", port=port, reload=False)
