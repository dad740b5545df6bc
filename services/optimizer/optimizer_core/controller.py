from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from libs.core import events, logging as core_logging, state_machine
from libs.core.models import (
    AssessmentResult,
    BulletOption,
    CyclePhase,
    CycleResult,
    Document,
    ExperienceImprovement,
    Improvement,
    IterationRecord,
    MatchAssessment,
    Strategy,
    utcnow,
)

from .config import OptimizerSettings
from .context import all_skills, experience_context
from .errors import OptimizerError
from .history import HistoryLog
from .merge import append_to_first_entry, merge
from .skills import filter_new_skills, gap_keywords

LOGGER = core_logging.get_logger("optimizer")


def select_strategy(iteration_count: int) -> Strategy:
    if iteration_count == 0:
        return Strategy.major_rewrite
    return Strategy.gap_targeted


def describe_cycle(
    strategy: Optional[Strategy],
    improvement: Optional[Improvement],
    prior_score: int,
    new_score: int,
    target_score: int,
) -> str:
    lines: list[str] = []
    if strategy is None:
        lines.append(f"Score {new_score} already meets the {target_score} target; nothing was changed.")
        return "\n".join(lines)
    improvement = improvement or Improvement()
    added = sum(len(item.new_achievements) for item in improvement.experience_improvements)
    if strategy == Strategy.major_rewrite:
        lines.append("Major rewrite applied.")
        if improvement.summary is not None:
            lines.append("Rewrote the professional summary.")
        lines.append(
            f"Replaced achievements of {len(improvement.experience_improvements)} experience "
            f"entr{'y' if len(improvement.experience_improvements) == 1 else 'ies'}."
        )
    elif strategy == Strategy.gap_targeted:
        lines.append("Gap-targeted refinement applied; earlier content kept.")
        lines.append(f"Added {added} achievement(s) addressing outstanding gaps.")
    else:
        lines.append(f"Added {added} selected achievement(s) to the first experience entry.")
    lines.append(f"Added {len(improvement.new_skills)} skill(s).")
    delta = new_score - prior_score
    lines.append(f"Score: {prior_score} -> {new_score} ({delta:+d}).")
    if new_score >= target_score:
        lines.append(f"Target {target_score} reached.")
    else:
        lines.append(f"{target_score - new_score} point(s) below the {target_score} target.")
    return "\n".join(lines)


class OptimizationController:
    """Runs one optimization cycle per call against a borrowed document.

    The caller's document is never mutated: edits are applied to a copy that is returned only
    when every oracle call of the cycle succeeded.
    """

    def __init__(
        self,
        score_oracle: Any,
        content_oracle: Any,
        gap_bullet_generator: Any,
        bullet_option_generator: Any,
        *,
        history: Optional[HistoryLog] = None,
        settings: Optional[OptimizerSettings] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.score_oracle = score_oracle
        self.content_oracle = content_oracle
        self.gap_bullet_generator = gap_bullet_generator
        self.bullet_option_generator = bullet_option_generator
        self.history = history if history is not None else HistoryLog()
        self.settings = settings or OptimizerSettings()
        self.phase = CyclePhase.idle
        self._clock = clock

    def _advance(self, new_phase: CyclePhase) -> None:
        if not state_machine.validate_cycle_transition(self.phase, new_phase):
            raise OptimizerError(
                f"invalid_cycle_transition:{self.phase.value}->{new_phase.value}", status_code=500
            )
        LOGGER.debug(
            events.CYCLE_PHASE_CHANGED,
            from_phase=self.phase.value,
            to_phase=new_phase.value,
        )
        self.phase = new_phase

    def _record(self, iteration_number: int, score: int) -> IterationRecord:
        return self.history.append(
            IterationRecord(iteration_number=iteration_number, score=score, timestamp=self._clock())
        )

    def _iteration_number(self, iteration_count: Optional[int]) -> int:
        if iteration_count is None:
            return self.history.next_iteration_number()
        return iteration_count + 1

    async def run_cycle(
        self, document: Document, target_description: str, iteration_count: int
    ) -> CycleResult:
        if iteration_count < 0:
            raise OptimizerError("iteration_count must be >= 0")
        self.phase = CyclePhase.idle
        started_at = time.monotonic()
        target_score = self.settings.auto_target_score
        LOGGER.info(
            events.CYCLE_STARTED,
            iteration_count=int(iteration_count),
            experience_entries=len(document.experience_entries),
            skill_groups=len(document.skill_groups),
        )
        try:
            self._advance(CyclePhase.scoring)
            assessment = await self.score_oracle.score(document, target_description)
            if assessment.score >= target_score:
                self._advance(CyclePhase.recording)
                entry = self._record(iteration_count + 1, assessment.score)
                self._advance(CyclePhase.done)
                LOGGER.info(
                    events.CYCLE_SHORT_CIRCUITED,
                    iteration=entry.iteration_number,
                    score=assessment.score,
                    target_score=target_score,
                )
                return CycleResult(
                    document=document.model_copy(deep=True),
                    assessment=assessment,
                    history_entry=entry,
                    prior_score=assessment.score,
                    score_delta=0,
                    improvement_summary=describe_cycle(
                        None, None, assessment.score, assessment.score, target_score
                    ),
                    target_reached=True,
                )

            strategy = select_strategy(iteration_count)
            if strategy == Strategy.major_rewrite:
                self._advance(CyclePhase.major_rewrite)
                improvement = await self._major_rewrite(document, target_description, assessment.gaps)
            else:
                self._advance(CyclePhase.gap_targeted)
                improvement = await self._gap_targeted(document, target_description, assessment.gaps)

            self._advance(CyclePhase.merging)
            edited = merge(document, improvement, strategy)

            self._advance(CyclePhase.rescoring)
            new_assessment = await self.score_oracle.score(edited, target_description)

            self._advance(CyclePhase.recording)
            entry = self._record(iteration_count + 1, new_assessment.score)
            target_reached = new_assessment.score >= target_score
            self._advance(CyclePhase.done if target_reached else CyclePhase.continue_)
        except OptimizerError as exc:
            LOGGER.warning(
                events.CYCLE_FAILED,
                iteration_count=int(iteration_count),
                phase=self.phase.value,
                error=exc.detail,
                duration_ms=int(max(0.0, time.monotonic() - started_at) * 1000),
            )
            raise

        LOGGER.info(
            events.CYCLE_FINISHED,
            iteration=entry.iteration_number,
            strategy=strategy.value,
            prior_score=assessment.score,
            score=new_assessment.score,
            target_reached=target_reached,
            duration_ms=int(max(0.0, time.monotonic() - started_at) * 1000),
        )
        return CycleResult(
            document=edited,
            assessment=new_assessment,
            history_entry=entry,
            strategy=strategy,
            improvement=improvement,
            prior_score=assessment.score,
            score_delta=new_assessment.score - assessment.score,
            improvement_summary=describe_cycle(
                strategy, improvement, assessment.score, new_assessment.score, target_score
            ),
            target_reached=target_reached,
        )

    async def assess(
        self,
        document: Document,
        target_description: str,
        iteration_count: Optional[int] = None,
    ) -> AssessmentResult:
        """Score ``document`` and record the score without editing anything."""
        if iteration_count is not None and iteration_count < 0:
            raise OptimizerError("iteration_count must be >= 0")
        self.phase = CyclePhase.idle
        target_score = self.settings.auto_target_score
        try:
            self._advance(CyclePhase.scoring)
            assessment = await self.score_oracle.score(document, target_description)
            self._advance(CyclePhase.recording)
            entry = self._record(self._iteration_number(iteration_count), assessment.score)
            target_reached = assessment.score >= target_score
            self._advance(CyclePhase.done if target_reached else CyclePhase.continue_)
        except OptimizerError as exc:
            LOGGER.warning(events.CYCLE_FAILED, phase=self.phase.value, error=exc.detail)
            raise
        LOGGER.info(
            events.ASSESSMENT_RECORDED,
            iteration=entry.iteration_number,
            score=assessment.score,
            gaps=len(assessment.gaps),
            target_reached=target_reached,
        )
        return AssessmentResult(
            assessment=assessment, history_entry=entry, target_reached=target_reached
        )

    async def _major_rewrite(
        self, document: Document, target_description: str, gaps: Sequence[str]
    ) -> Improvement:
        summary = await self.content_oracle.rewrite_summary(
            document.summary, target_description, list(gaps)
        )
        rewritten: list[ExperienceImprovement] = []
        # One entry at a time so a failure points at a single entry.
        for entry in document.experience_entries:
            achievements = await self.content_oracle.rewrite_achievements(
                entry.title,
                entry.company,
                list(entry.achievements),
                target_description,
                list(gaps),
            )
            rewritten.append(
                ExperienceImprovement(entry_id=entry.id, new_achievements=achievements)
            )
        new_skills: list[str] = []
        if document.skill_groups:
            suggested = await self.content_oracle.suggest_skills(
                all_skills(document), target_description, list(gaps)
            )
            new_skills = filter_new_skills(document.skill_groups[0].skills, suggested)
        return Improvement(
            summary=summary,
            experience_improvements=rewritten,
            new_skills=new_skills,
        )

    async def _gap_targeted(
        self, document: Document, target_description: str, gaps: Sequence[str]
    ) -> Improvement:
        experience_improvements: list[ExperienceImprovement] = []
        if document.experience_entries:
            bullets = await self.gap_bullet_generator.generate(
                list(gaps), target_description, experience_context(document)
            )
            if bullets:
                experience_improvements.append(
                    ExperienceImprovement(
                        entry_id=document.experience_entries[0].id, new_achievements=bullets
                    )
                )
        new_skills: list[str] = []
        if document.skill_groups:
            keywords = gap_keywords(gaps, self.settings.gap_keyword_min_length)
            new_skills = filter_new_skills(document.skill_groups[0].skills, keywords)[
                : self.settings.gap_skill_limit
            ]
        return Improvement(experience_improvements=experience_improvements, new_skills=new_skills)

    async def generate_options(
        self,
        document: Document,
        target_description: str,
        gaps: Sequence[str],
        assessment: MatchAssessment,
    ) -> list[BulletOption]:
        options = await self.bullet_option_generator.generate(
            document, target_description, list(gaps), assessment
        )
        LOGGER.info(
            events.OPTIONS_GENERATED,
            score=assessment.score,
            gaps=len(gaps),
            options=len(options),
        )
        return options

    async def apply_option(
        self,
        document: Document,
        option: BulletOption,
        target_description: Optional[str] = None,
        prior_assessment: Optional[MatchAssessment] = None,
        iteration_count: Optional[int] = None,
    ) -> CycleResult:
        if iteration_count is not None and iteration_count < 0:
            raise OptimizerError("iteration_count must be >= 0")
        if not document.experience_entries:
            raise OptimizerError("apply_option_requires_experience_entry")
        target = document.target_description if target_description is None else target_description
        target_score = self.settings.manual_target_score
        previous = self.history.latest
        if prior_assessment is not None:
            prior_score: Optional[int] = prior_assessment.score
        else:
            prior_score = previous.score if previous is not None else None

        self.phase = CyclePhase.idle
        try:
            self._advance(CyclePhase.merging)
            first_skills = document.skill_groups[0].skills if document.skill_groups else []
            improvement = Improvement(
                experience_improvements=[
                    ExperienceImprovement(
                        entry_id=document.experience_entries[0].id,
                        new_achievements=list(option.achievements),
                    )
                ],
                new_skills=filter_new_skills(first_skills, option.skills)
                if document.skill_groups
                else [],
            )
            edited = append_to_first_entry(document, option.achievements, option.skills)
            self._advance(CyclePhase.rescoring)
            new_assessment = await self.score_oracle.score(edited, target)
            self._advance(CyclePhase.recording)
            entry = self._record(self._iteration_number(iteration_count), new_assessment.score)
            target_reached = new_assessment.score >= target_score
            self._advance(CyclePhase.done if target_reached else CyclePhase.continue_)
        except OptimizerError as exc:
            LOGGER.warning(
                events.CYCLE_FAILED,
                strategy=Strategy.option_applied.value,
                phase=self.phase.value,
                error=exc.detail,
            )
            raise

        LOGGER.info(
            events.OPTION_APPLIED,
            theme=option.theme,
            achievements=len(option.achievements),
            iteration=entry.iteration_number,
            prior_score=prior_score,
            score=new_assessment.score,
            target_reached=target_reached,
        )
        baseline = prior_score if prior_score is not None else new_assessment.score
        return CycleResult(
            document=edited,
            assessment=new_assessment,
            history_entry=entry,
            strategy=Strategy.option_applied,
            improvement=improvement,
            prior_score=prior_score,
            score_delta=None if prior_score is None else new_assessment.score - prior_score,
            improvement_summary=describe_cycle(
                Strategy.option_applied, improvement, baseline, new_assessment.score, target_score
            ),
            target_reached=target_reached,
        )
