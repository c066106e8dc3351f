from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger("readgrade")

ENHANCE_SYSTEM_PROMPT = """You are a document reconstruction expert. You receive a document image and a first-pass OCR extraction of it. Your job is to produce a perfect, corrected version of the extracted text.

Rules:
- Fix any misread characters, broken words, or encoding errors
- Reconstruct tables with proper markdown table syntax, preserving all columns, rows, merged cells
- Maintain the exact document structure: headings, paragraphs, lists, tables in correct order
- Preserve all numbers, dates, and proper nouns exactly as they appear in the image
- Do NOT add content that isn't in the original document
- Do NOT add commentary, explanations, or notes. Output ONLY the corrected document text
- Use markdown formatting (headings, bold, tables, lists) to match the original layout
- If the OCR extraction is already perfect, return it unchanged"""

ENHANCE_USER_PROMPT = (
    "Here is the first-pass OCR extraction of this document. "
    "Please correct any errors and reconstruct it with 100% fidelity to the original:\n\n"
)


class RemoteApiError(Exception):
    def __init__(self, status_code: int, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = int(status_code)
        self.message = message
        self.details = details


def _error_message(resp: httpx.Response, prefix: str) -> str:
    """Prefer the upstream `error.message`; fall back to the bare status."""
    msg = f"{prefix}: {resp.status_code}"
    try:
        data = resp.json()
    except ValueError:
        return msg
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    return msg


def as_data_uri(image: str) -> str:
    return image if image.startswith("data:") else f"data:image/png;base64,{image}"


class _BaseClient:
    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        timeout_seconds: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = (url or "").strip()
        self._api_key = (api_key or "").strip()
        self._timeout = httpx.Timeout(float(timeout_seconds), connect=10.0)
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def _post_json(self, payload: Dict[str, Any], error_prefix: str) -> httpx.Response:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.post(self._url, json=payload, headers=headers)

        if resp.status_code >= 400:
            msg = _error_message(resp, error_prefix)
            logger.warning("%s (%s): %s", error_prefix, resp.status_code, resp.text[:300])
            raise RemoteApiError(resp.status_code, msg, details=resp.text)
        return resp


class LayoutOcrClient(_BaseClient):
    """Remote layout-parsing OCR. The response JSON is passed through untouched."""

    model = "glm-ocr"

    async def parse(self, file: str) -> Any:
        resp = await self._post_json({"model": self.model, "file": file}, "API error")
        return resp.json()


class EnhancementClient(_BaseClient):
    """Vision-language pass that corrects a first-pass OCR extraction."""

    def __init__(self, url: str, api_key: str, *, model: str, **kwargs: Any) -> None:
        super().__init__(url, api_key, **kwargs)
        self.model = model

    def build_payload(self, image: str, extracted_text: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": ENHANCE_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "image_url", "image_url": {"url": as_data_uri(image)}},
                        {"type": "text", "text": ENHANCE_USER_PROMPT + extracted_text},
                    ],
                },
            ],
            "temperature": 0.1,
            "max_tokens": 8192,
        }

    async def enhance(self, image: str, extracted_text: str) -> Optional[str]:
        resp = await self._post_json(self.build_payload(image, extracted_text), "Enhancement API error")
        data = resp.json()
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None
        return content or None
