"""Tests for the Anthropic-backed article summarizer.

``respx`` mocks the Messages endpoint; every failure path must come back as
a string rather than an exception.
"""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from bookcard.config import Settings
from bookcard.summarizer import MISSING_KEY_MESSAGE, build_payload, summarize, truncate

_ENDPOINT = "https://api.anthropic.test/v1/messages"


@pytest.fixture
def config() -> Settings:
    return Settings(
        anthropic_base_url="https://api.anthropic.test",
        anthropic_version="2023-06-01",
        summary_max_tokens=500,
        summary_max_chars=10_000,
    )


class TestTruncate:
    def test_short_text_unchanged(self) -> None:
        assert truncate("abc", 10) == "abc"

    def test_long_text_gets_ellipsis(self) -> None:
        assert truncate("abcdefghij", 4) == "abcd..."


class TestBuildPayload:
    def test_shape(self) -> None:
        payload = build_payload("Body text", "model-x", 300, 10_000)
        assert payload["model"] == "model-x"
        assert payload["max_tokens"] == 300
        assert len(payload["messages"]) == 1
        assert payload["messages"][0]["role"] == "user"
        assert "Body text" in payload["messages"][0]["content"]


class TestSummarize:
    async def test_empty_key_returns_message_without_request(self, config: Settings) -> None:
        with respx.mock(assert_all_called=False) as router:
            route = router.post(_ENDPOINT).mock(return_value=httpx.Response(200, json={}))
            result = await summarize("text", "", "model-x", config=config)

        assert result == MISSING_KEY_MESSAGE
        assert not route.called

    async def test_config_is_required(self) -> None:
        with pytest.raises(TypeError):
            await summarize("text", "sk-test", "model-x")

    async def test_success_returns_first_text_block(self, config: Settings) -> None:
        body = {"content": [{"type": "text", "text": "  A short summary.  "}, {"text": "ignored"}]}
        with respx.mock:
            route = respx.post(_ENDPOINT).mock(return_value=httpx.Response(200, json=body))
            result = await summarize("Article body", "sk-test", "model-x", config=config)

        assert result == "A short summary."
        request = route.calls.last.request
        assert request.headers["x-api-key"] == "sk-test"
        assert request.headers["anthropic-version"] == "2023-06-01"
        sent = json.loads(request.content)
        assert sent["model"] == "model-x"
        assert sent["max_tokens"] == 500
        assert "Article body" in sent["messages"][0]["content"]

    async def test_long_text_is_truncated(self, config: Settings) -> None:
        with respx.mock:
            route = respx.post(_ENDPOINT).mock(
                return_value=httpx.Response(200, json={"content": [{"text": "ok"}]})
            )
            await summarize("a" * 10_050, "sk-test", "model-x", config=config)

        prompt = json.loads(route.calls.last.request.content)["messages"][0]["content"]
        assert "a" * 10_000 + "..." in prompt
        assert "a" * 10_001 not in prompt

    async def test_api_error_message_is_returned(self, config: Settings) -> None:
        error = {"type": "error", "error": {"type": "authentication_error", "message": "invalid x-api-key"}}
        with respx.mock:
            respx.post(_ENDPOINT).mock(return_value=httpx.Response(401, json=error))
            result = await summarize("text", "bad", "model-x", config=config)

        assert "invalid x-api-key" in result
        assert "401" in result

    async def test_error_without_json_body(self, config: Settings) -> None:
        with respx.mock:
            respx.post(_ENDPOINT).mock(return_value=httpx.Response(500, text="oops"))
            result = await summarize("text", "sk-test", "model-x", config=config)

        assert result == "Summary unavailable: HTTP 500"

    async def test_transport_error_is_degraded(self, config: Settings) -> None:
        with respx.mock:
            respx.post(_ENDPOINT).mock(side_effect=httpx.ConnectError)
            result = await summarize("text", "sk-test", "model-x", config=config)

        assert result == "Summary unavailable: ConnectError"

    @pytest.mark.parametrize("body", [{}, {"content": []}, {"content": [{"type": "tool_use"}]}])
    async def test_missing_content_falls_back(self, config: Settings, body: dict) -> None:
        with respx.mock:
            respx.post(_ENDPOINT).mock(return_value=httpx.Response(200, json=body))
            result = await summarize("text", "sk-test", "model-x", config=config)

        assert result == "No summary available."
