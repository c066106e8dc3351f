"""Tests for the remote OCR / enhancement clients (no network)."""

import asyncio
import json

import httpx
import pytest

from grade_api.remote import EnhancementClient, LayoutOcrClient, RemoteApiError, as_data_uri


def _layout(handler, key="k-123"):
    return LayoutOcrClient("https://ocr.test/layout", key, timeout_seconds=5, transport=httpx.MockTransport(handler))


def _enhancer(handler, key="k-456"):
    return EnhancementClient(
        "https://enhance.test/chat",
        key,
        model="vision-test",
        timeout_seconds=5,
        transport=httpx.MockTransport(handler),
    )


class TestLayoutOcrClient:
    def test_passes_response_through(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"md_results": "# Title", "layout_details": []})

        data = asyncio.run(_layout(handler).parse("data:image/png;base64,AAAA"))
        assert data == {"md_results": "# Title", "layout_details": []}
        assert seen["auth"] == "Bearer k-123"
        assert seen["body"] == {"model": "glm-ocr", "file": "data:image/png;base64,AAAA"}

    def test_upstream_error_message_preferred(self):
        def handler(request):
            return httpx.Response(401, json={"error": {"message": "invalid api key"}})

        with pytest.raises(RemoteApiError) as ei:
            asyncio.run(_layout(handler).parse("AAAA"))
        assert ei.value.status_code == 401
        assert ei.value.message == "invalid api key"
        assert "invalid api key" in ei.value.details

    def test_non_json_error_uses_status(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(RemoteApiError) as ei:
            asyncio.run(_layout(handler).parse("AAAA"))
        assert ei.value.message == "API error: 502"
        assert ei.value.details == "Bad Gateway"

    def test_configured(self):
        assert _layout(lambda r: httpx.Response(200), key="").configured is False
        assert _layout(lambda r: httpx.Response(200)).configured is True


class TestEnhancementClient:
    def test_returns_message_content(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": "# Fixed text"}}]})

        out = asyncio.run(_enhancer(handler).enhance("QUJD", "Fixd txt"))
        assert out == "# Fixed text"

        body = seen["body"]
        assert body["model"] == "vision-test"
        assert body["temperature"] == 0.1
        assert body["max_tokens"] == 8192
        assert body["messages"][0]["role"] == "system"
        user = body["messages"][1]["content"]
        assert user[0]["image_url"]["url"] == "data:image/png;base64,QUJD"
        assert user[1]["text"].endswith("Fixd txt")

    def test_missing_choices_returns_none(self):
        out = asyncio.run(_enhancer(lambda r: httpx.Response(200, json={"choices": []})).enhance("x", "y"))
        assert out is None

    def test_error_status(self):
        def handler(request):
            return httpx.Response(429, json={"error": {"message": "rate limited"}})

        with pytest.raises(RemoteApiError) as ei:
            asyncio.run(_enhancer(handler).enhance("x", "y"))
        assert ei.value.status_code == 429
        assert ei.value.message == "rate limited"


def test_as_data_uri():
    assert as_data_uri("data:image/jpeg;base64,AAA") == "data:image/jpeg;base64,AAA"
    assert as_data_uri("AAA") == "data:image/png;base64,AAA"
