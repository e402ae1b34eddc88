import json

import httpx
import pytest

from vibe_check.completion import SYSTEM_PROMPT, TEMPERATURE, CompletionClient
from vibe_check.config import Settings
from vibe_check.errors import TransportError, UpstreamError


def _completion_body(content: str) -> dict:
    return {
        "id": "cmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "sonar-pro",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }


def _client(handler) -> CompletionClient:
    settings = Settings(perplexity_api_key="pplx-test", upstream_timeout=5)
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return CompletionClient(settings, http_client=http_client)


def test_complete_sends_system_prompt_and_low_temperature() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion_body('{"ok": true}'))

    reply = _client(handler).complete("  Analyze this idea  ")

    assert reply == '{"ok": true}'
    assert captured["path"].endswith("/chat/completions")
    assert captured["auth"] == "Bearer pplx-test"
    body = captured["body"]
    assert body["model"] == "sonar-pro"
    assert body["temperature"] == TEMPERATURE
    assert body["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert body["messages"][1] == {"role": "user", "content": "Analyze this idea"}


def test_non_success_status_raises_upstream_error_without_retry() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500, text="internal failure")

    with pytest.raises(UpstreamError) as excinfo:
        _client(handler).complete("prompt")

    assert excinfo.value.status_code == 500
    assert "internal failure" in excinfo.value.body
    assert "500" in str(excinfo.value)
    assert len(calls) == 1


def test_connection_failure_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError):
        _client(handler).complete("prompt")


def test_timeout_surfaces_as_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(UpstreamError) as excinfo:
        _client(handler).complete("prompt")

    assert excinfo.value.status_code == 504


def test_empty_message_content_returns_empty_string() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = _completion_body("")
        body["choices"][0]["message"]["content"] = None
        return httpx.Response(200, json=body)

    assert _client(handler).complete("prompt") == ""
