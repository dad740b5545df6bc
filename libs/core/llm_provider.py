from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen


@dataclass
class LLMResponse:
    content: str


class LLMProviderError(Exception):
    pass


class LLMProvider:
    def generate(self, prompt: str) -> LLMResponse:  # pragma: no cover - interface
        raise NotImplementedError


MOCK_PAYLOAD: Dict[str, Any] = {
    "matchScore": 50,
    "strengths": ["Mock strength"],
    "gaps": ["Mock gap"],
    "summary": "Mock summary",
    "achievements": ["Mock achievement"],
    "skills": ["Mock skill"],
    "bullets": ["Mock bullet"],
    "options": [
        {"theme": f"Mock theme {idx}", "achievements": ["Mock achievement"], "skills": []}
        for idx in range(1, 6)
    ],
}


class MockLLMProvider(LLMProvider):
    """Returns the same text for every prompt.

    The default answers every optimizer prompt with a well-formed object (five options).
    """

    def __init__(self, content: Optional[str] = None) -> None:
        self.content = json.dumps(MOCK_PAYLOAD) if content is None else content

    def generate(self, prompt: str) -> LLMResponse:
        return LLMResponse(content=self.content)


class OpenAIProvider(LLMProvider):
    """Single-shot client for the OpenAI Responses API.

    Failures are raised immediately as ``LLMProviderError``; callers decide whether to try again.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com",
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
        timeout_s: float = 30.0,
        json_output: bool = True,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout_s = timeout_s
        self.json_output = json_output

    def generate(self, prompt: str) -> LLMResponse:
        payload: Dict[str, Any] = {"model": self.model, "input": prompt}
        if self.temperature is not None and _model_supports_temperature(self.model):
            payload["temperature"] = self.temperature
        if self.max_output_tokens is not None:
            payload["max_output_tokens"] = self.max_output_tokens
        if self.json_output:
            payload["text"] = {"format": {"type": "json_object"}}
        request = Request(
            f"{self.base_url}/v1/responses",
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            method="POST",
        )
        try:
            with urlopen(request, timeout=self.timeout_s) as response:
                body = response.read().decode("utf-8")
        except HTTPError as exc:
            detail = exc.read().decode("utf-8") if exc.fp else str(exc)
            raise LLMProviderError(f"OpenAI API error ({exc.code}): {detail}") from exc
        except (URLError, TimeoutError) as exc:
            raise LLMProviderError(f"OpenAI API connection error: {exc}") from exc
        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise LLMProviderError(f"OpenAI API returned invalid JSON: {exc}") from exc
        text = _extract_output_text(data)
        if not text:
            raise LLMProviderError("OpenAI API returned empty output")
        return LLMResponse(content=text)


def resolve_provider(
    provider_name: str,
    *,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    temperature: Optional[float] = None,
    max_output_tokens: Optional[int] = None,
    timeout_s: Optional[float] = None,
) -> LLMProvider:
    name = (provider_name or "mock").lower()
    if name == "openai":
        if not api_key:
            raise ValueError("OPENAI_API_KEY is required when LLM_PROVIDER=openai")
        if not model:
            raise ValueError("OPENAI_MODEL is required when LLM_PROVIDER=openai")
        return OpenAIProvider(
            api_key=api_key,
            model=model,
            base_url=base_url or "https://api.openai.com",
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            timeout_s=timeout_s or 30.0,
        )
    return MockLLMProvider()


def _extract_output_text(response: Dict[str, Any]) -> str:
    parts: list[str] = []
    for item in response.get("output", []):
        if item.get("type") != "message":
            continue
        for content in item.get("content", []):
            if content.get("type") == "output_text":
                parts.append(content.get("text", ""))
    return "".join(parts).strip()


def _model_supports_temperature(model: str) -> bool:
    normalized = (model or "").strip().lower()
    # GPT-5 responses currently reject temperature.
    return not normalized.startswith("gpt-5")
