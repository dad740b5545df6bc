from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Sequence

from libs.core import events, logging as core_logging, prompts
from libs.core.models import Document, MatchAssessment

from .context import document_to_text
from .errors import OracleError
from .validation import (
    extract_json,
    parse_json_object,
    require_score,
    require_string_list,
    require_text,
)

LOGGER = core_logging.get_logger("optimizer")


def _provider_model(provider: Any) -> str:
    model = getattr(provider, "model", None)
    if isinstance(model, str) and model.strip():
        return model.strip()
    return ""


async def generate_json(provider: Any, prompt: str, *, operation: str) -> Dict[str, Any]:
    """Run one provider call off the event loop and parse its JSON object output.

    Any provider failure surfaces as ``OracleError``; nothing is retried.
    """
    started_at = time.monotonic()
    try:
        response = await asyncio.to_thread(provider.generate, prompt)
    except Exception as exc:  # noqa: BLE001
        LOGGER.warning(
            events.ORACLE_CALL_FAILED,
            operation=operation,
            provider_type=provider.__class__.__name__,
            provider_model=_provider_model(provider),
            prompt_chars=int(len(prompt)),
            duration_ms=int(max(0.0, time.monotonic() - started_at) * 1000),
            error=str(exc),
        )
        raise OracleError(f"{operation}_failed:{exc}") from exc
    LOGGER.info(
        events.ORACLE_CALL_FINISHED,
        operation=operation,
        provider_type=provider.__class__.__name__,
        provider_model=_provider_model(provider),
        prompt_chars=int(len(prompt)),
        duration_ms=int(max(0.0, time.monotonic() - started_at) * 1000),
    )
    content = getattr(response, "content", None)
    if not isinstance(content, str) or not content.strip():
        raise OracleError(f"{operation}_empty_output")
    return parse_json_object(extract_json(content))


class ScoreOracle:
    def __init__(self, provider: Any) -> None:
        self.provider = provider

    async def score(self, document: Document, target_description: str) -> MatchAssessment:
        prompt = prompts.match_score_prompt(document_to_text(document), target_description)
        payload = await generate_json(self.provider, prompt, operation="score")
        return MatchAssessment(
            score=require_score(payload, "matchScore"),
            strengths=require_string_list(payload, "strengths"),
            gaps=require_string_list(payload, "gaps"),
        )


class ContentOracle:
    def __init__(self, provider: Any) -> None:
        self.provider = provider

    async def rewrite_summary(
        self,
        current_summary: str,
        target_description: str,
        gaps: Sequence[str] | None = None,
    ) -> str:
        prompt = prompts.summary_rewrite_prompt(current_summary, target_description, gaps)
        payload = await generate_json(self.provider, prompt, operation="rewrite_summary")
        return require_text(payload, "summary")

    async def rewrite_achievements(
        self,
        entry_title: str,
        company: str,
        current_achievements: Sequence[str],
        target_description: str,
        gaps: Sequence[str] | None = None,
    ) -> list[str]:
        prompt = prompts.achievements_rewrite_prompt(
            entry_title, company, current_achievements, target_description, gaps
        )
        payload = await generate_json(self.provider, prompt, operation="rewrite_achievements")
        return require_string_list(payload, "achievements", non_empty=True)

    async def suggest_skills(
        self,
        current_skills: Sequence[str],
        target_description: str,
        gaps: Sequence[str] | None = None,
    ) -> list[str]:
        prompt = prompts.skill_suggestion_prompt(current_skills, target_description, gaps)
        payload = await generate_json(self.provider, prompt, operation="suggest_skills")
        return require_string_list(payload, "skills")
