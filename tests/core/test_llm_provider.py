from __future__ import annotations

import io
import json
from urllib.error import HTTPError, URLError

import pytest

from libs.core.llm_provider import (
    LLMProviderError,
    MockLLMProvider,
    OpenAIProvider,
    resolve_provider,
)
from libs.core import llm_provider as llm_provider_module


class _FakeHTTPResponse:
    def __init__(self, payload: dict) -> None:
        self._raw = json.dumps(payload).encode("utf-8")

    def read(self) -> bytes:
        return self._raw

    def __enter__(self) -> "_FakeHTTPResponse":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        return False


def _success_payload() -> dict:
    return {
        "output": [
            {"type": "reasoning", "content": []},
            {
                "type": "message",
                "content": [{"type": "output_text", "text": '{"matchScore":88}'}],
            },
        ]
    }


def test_openai_provider_omits_temperature_for_gpt5(monkeypatch) -> None:
    captured_payloads: list[dict] = []

    def _fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        captured_payloads.append(json.loads(request.data.decode("utf-8")))
        return _FakeHTTPResponse(_success_payload())

    monkeypatch.setattr(llm_provider_module, "urlopen", _fake_urlopen)

    provider = OpenAIProvider(api_key="test-key", model="gpt-5-mini", temperature=0.7)
    response = provider.generate("hello")
    assert response.content == '{"matchScore":88}'
    assert len(captured_payloads) == 1
    assert "temperature" not in captured_payloads[0]


def test_openai_provider_requests_json_output(monkeypatch) -> None:
    captured: dict = {}

    def _fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        captured["url"] = request.full_url
        captured["timeout"] = timeout
        captured["body"] = json.loads(request.data.decode("utf-8"))
        return _FakeHTTPResponse(_success_payload())

    monkeypatch.setattr(llm_provider_module, "urlopen", _fake_urlopen)

    provider = OpenAIProvider(
        api_key="test-key",
        model="gpt-4.1-mini",
        base_url="https://example.test/",
        temperature=0.3,
        max_output_tokens=800,
        timeout_s=12.5,
    )
    provider.generate("score this")
    assert captured["url"] == "https://example.test/v1/responses"
    assert captured["timeout"] == 12.5
    assert captured["body"]["temperature"] == 0.3
    assert captured["body"]["max_output_tokens"] == 800
    assert captured["body"]["text"] == {"format": {"type": "json_object"}}


def test_openai_provider_does_not_retry_http_errors(monkeypatch) -> None:
    calls = {"count": 0}

    def _fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        calls["count"] += 1
        raise HTTPError(
            url="https://api.openai.com/v1/responses",
            code=503,
            msg="Service Unavailable",
            hdrs=None,
            fp=io.BytesIO(b'{"error":{"message":"overloaded"}}'),
        )

    monkeypatch.setattr(llm_provider_module, "urlopen", _fake_urlopen)

    provider = OpenAIProvider(api_key="test-key", model="gpt-4.1-mini")
    with pytest.raises(LLMProviderError, match="503"):
        provider.generate("hello")
    assert calls["count"] == 1


def test_openai_provider_wraps_connection_errors(monkeypatch) -> None:
    def _fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        raise URLError("connection refused")

    monkeypatch.setattr(llm_provider_module, "urlopen", _fake_urlopen)

    provider = OpenAIProvider(api_key="test-key", model="gpt-4.1-mini")
    with pytest.raises(LLMProviderError, match="connection"):
        provider.generate("hello")


def test_openai_provider_rejects_empty_output(monkeypatch) -> None:
    monkeypatch.setattr(
        llm_provider_module,
        "urlopen",
        lambda request, timeout=0: _FakeHTTPResponse({"output": []}),
    )
    provider = OpenAIProvider(api_key="test-key", model="gpt-4.1-mini")
    with pytest.raises(LLMProviderError, match="empty output"):
        provider.generate("hello")


def test_resolve_provider_defaults_to_mock() -> None:
    provider = resolve_provider("")
    assert isinstance(provider, MockLLMProvider)
    payload = json.loads(provider.generate("anything").content)
    assert payload["matchScore"] == 50
    assert len(payload["options"]) == 5
    assert MockLLMProvider(content="{}").generate("anything").content == "{}"


def test_resolve_provider_requires_openai_credentials() -> None:
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        resolve_provider("openai", model="gpt-4.1-mini")
    with pytest.raises(ValueError, match="OPENAI_MODEL"):
        resolve_provider("openai", api_key="test-key")


def test_resolve_provider_builds_openai_provider() -> None:
    provider = resolve_provider(
        "OpenAI", api_key="test-key", model="gpt-4.1-mini", temperature=0.9, timeout_s=5
    )
    assert isinstance(provider, OpenAIProvider)
    assert provider.temperature == 0.9
    assert provider.timeout_s == 5
