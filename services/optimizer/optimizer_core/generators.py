from __future__ import annotations

from typing import Any, Sequence

from libs.core import events, logging as core_logging, prompts
from libs.core.models import BulletOption, Document, MatchAssessment

from .context import document_to_text
from .errors import ValidationError
from .oracles import generate_json
from .validation import require_object_list, require_string_list, require_text

LOGGER = core_logging.get_logger("optimizer")


class GapBulletGenerator:
    """Writes exactly one new achievement per outstanding gap."""

    def __init__(self, provider: Any) -> None:
        self.provider = provider

    async def generate(
        self,
        gaps: Sequence[str],
        target_description: str,
        experience_context: Sequence[str],
    ) -> list[str]:
        if not gaps:
            return []
        prompt = prompts.gap_bullets_prompt(gaps, target_description, experience_context)
        payload = await generate_json(self.provider, prompt, operation="gap_bullets")
        bullets = require_string_list(payload, "bullets")
        if len(bullets) != len(gaps):
            raise ValidationError(f"gap_bullet_count_mismatch:{len(bullets)}!={len(gaps)}")
        return bullets


class BulletOptionGenerator:
    def __init__(self, provider: Any, option_count: int = 5, target_score: int = 98) -> None:
        self.provider = provider
        self.option_count = option_count
        self.target_score = target_score

    async def generate(
        self,
        document: Document,
        target_description: str,
        gaps: Sequence[str],
        current_assessment: MatchAssessment,
    ) -> list[BulletOption]:
        prompt = prompts.bullet_options_prompt(
            document_to_text(document),
            target_description,
            gaps,
            current_score=current_assessment.score,
            target_score=self.target_score,
            option_count=self.option_count,
        )
        payload = await generate_json(self.provider, prompt, operation="bullet_options")
        raw_options = require_object_list(payload, "options")
        if len(raw_options) < self.option_count:
            raise ValidationError(
                f"bullet_option_count_mismatch:{len(raw_options)}<{self.option_count}"
            )
        if len(raw_options) > self.option_count:
            LOGGER.warning(
                events.OPTIONS_GENERATED,
                reason="extra_options_dropped",
                received=len(raw_options),
                kept=self.option_count,
            )
        options: list[BulletOption] = []
        for idx, raw in enumerate(raw_options[: self.option_count]):
            try:
                theme = require_text(raw, "theme")
                achievements = require_string_list(raw, "achievements", non_empty=True)
                skills = require_string_list(raw, "skills") if "skills" in raw else []
            except ValidationError as exc:
                raise ValidationError(f"options[{idx}].{exc.detail}") from exc
            options.append(BulletOption(theme=theme, achievements=achievements, skills=skills))
        return options
