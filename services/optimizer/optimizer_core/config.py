from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from libs.core import llm_provider

_DEFAULT_OPTIMIZER_OPENAI_TIMEOUT_S = 30.0
_DEFAULT_SCORE_TEMPERATURE = 0.3


def _parse_optional_float(value: str | None) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _parse_optional_int(value: str | None) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _resolve_float(primary: str | None, fallback: str | None, default: float) -> float:
    parsed_primary = _parse_optional_float(primary)
    if parsed_primary is not None:
        return parsed_primary
    parsed_fallback = _parse_optional_float(fallback)
    if parsed_fallback is not None:
        return parsed_fallback
    return default


def _resolve_int(value: str | None, default: int, minimum: int = 0) -> int:
    parsed = _parse_optional_int(value)
    if parsed is None:
        return default
    return max(minimum, parsed)


@dataclass(frozen=True)
class OptimizerSettings:
    auto_target_score: int = 95
    manual_target_score: int = 98
    manual_min_score: int = 90
    option_count: int = 5
    gap_skill_limit: int = 5
    gap_keyword_min_length: int = 3

    @classmethod
    def from_env(cls) -> "OptimizerSettings":
        defaults = cls()
        return cls(
            auto_target_score=_resolve_int(
                os.getenv("OPTIMIZER_AUTO_TARGET_SCORE"), defaults.auto_target_score
            ),
            manual_target_score=_resolve_int(
                os.getenv("OPTIMIZER_MANUAL_TARGET_SCORE"), defaults.manual_target_score
            ),
            manual_min_score=_resolve_int(
                os.getenv("OPTIMIZER_MANUAL_MIN_SCORE"), defaults.manual_min_score
            ),
            option_count=_resolve_int(
                os.getenv("OPTIMIZER_OPTION_COUNT"), defaults.option_count, minimum=1
            ),
            gap_skill_limit=_resolve_int(
                os.getenv("OPTIMIZER_GAP_SKILL_LIMIT"), defaults.gap_skill_limit
            ),
            gap_keyword_min_length=_resolve_int(
                os.getenv("OPTIMIZER_GAP_KEYWORD_MIN_LENGTH"), defaults.gap_keyword_min_length
            ),
        )


def create_provider_from_env() -> Any:
    return llm_provider.resolve_provider(
        os.getenv("LLM_PROVIDER", "mock"),
        api_key=os.getenv("OPENAI_API_KEY", ""),
        model=os.getenv("OPENAI_MODEL", ""),
        base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com"),
        temperature=_parse_optional_float(os.getenv("OPENAI_TEMPERATURE")),
        max_output_tokens=_parse_optional_int(os.getenv("OPENAI_MAX_OUTPUT_TOKENS")),
        timeout_s=_resolve_float(
            os.getenv("OPTIMIZER_OPENAI_TIMEOUT_S"),
            os.getenv("OPENAI_TIMEOUT_S"),
            _DEFAULT_OPTIMIZER_OPENAI_TIMEOUT_S,
        ),
    )


def create_score_provider_from_env() -> Any:
    provider_name = os.getenv("OPTIMIZER_SCORE_PROVIDER", os.getenv("LLM_PROVIDER", "mock"))
    temperature = _parse_optional_float(os.getenv("OPTIMIZER_SCORE_OPENAI_TEMPERATURE"))
    return llm_provider.resolve_provider(
        provider_name,
        api_key=os.getenv("OPENAI_API_KEY", ""),
        model=os.getenv("OPTIMIZER_SCORE_OPENAI_MODEL", os.getenv("OPENAI_MODEL", "")),
        base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com"),
        temperature=temperature if temperature is not None else _DEFAULT_SCORE_TEMPERATURE,
        max_output_tokens=_parse_optional_int(os.getenv("OPENAI_MAX_OUTPUT_TOKENS")),
        timeout_s=_resolve_float(
            os.getenv("OPTIMIZER_OPENAI_TIMEOUT_S"),
            os.getenv("OPENAI_TIMEOUT_S"),
            _DEFAULT_OPTIMIZER_OPENAI_TIMEOUT_S,
        ),
    )
