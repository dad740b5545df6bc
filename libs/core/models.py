from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Strategy(str, Enum):
    major_rewrite = "major_rewrite"
    gap_targeted = "gap_targeted"
    option_applied = "option_applied"


class CyclePhase(str, Enum):
    idle = "idle"
    scoring = "scoring"
    major_rewrite = "major_rewrite"
    gap_targeted = "gap_targeted"
    merging = "merging"
    rescoring = "rescoring"
    recording = "recording"
    done = "done"
    continue_ = "continue"


class SessionStatus(str, Enum):
    idle = "idle"
    running = "running"
    converged = "converged"


class ExperienceEntry(BaseModel):
    id: str
    title: str = ""
    company: str = ""
    date_range: str = ""
    achievements: List[str] = Field(default_factory=list)


class SkillGroup(BaseModel):
    category: str = ""
    skills: List[str] = Field(default_factory=list)


class Document(BaseModel):
    summary: str = ""
    experience_entries: List[ExperienceEntry] = Field(default_factory=list)
    skill_groups: List[SkillGroup] = Field(default_factory=list)
    target_description: str = ""


class MatchAssessment(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    strengths: List[str] = Field(default_factory=list)
    gaps: List[str] = Field(default_factory=list)


class IterationRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    iteration_number: int = Field(ge=1)
    score: int
    timestamp: datetime = Field(default_factory=utcnow)


class ExperienceImprovement(BaseModel):
    entry_id: str
    new_achievements: List[str] = Field(default_factory=list)


class Improvement(BaseModel):
    summary: Optional[str] = None
    experience_improvements: List[ExperienceImprovement] = Field(default_factory=list)
    new_skills: List[str] = Field(default_factory=list)


class BulletOption(BaseModel):
    theme: str
    achievements: List[str]
    skills: List[str] = Field(default_factory=list)


class CycleResult(BaseModel):
    document: Document
    assessment: MatchAssessment
    history_entry: IterationRecord
    strategy: Optional[Strategy] = None
    improvement: Optional[Improvement] = None
    prior_score: Optional[int] = None
    score_delta: Optional[int] = None
    improvement_summary: str = ""
    target_reached: bool = False


class AssessmentResult(BaseModel):
    assessment: MatchAssessment
    history_entry: IterationRecord
    target_reached: bool = False


class OptimizationState(BaseModel):
    model_config = ConfigDict(frozen=True)

    document: Document
    target_description: str = ""
    status: SessionStatus = SessionStatus.idle
    iteration_count: int = 0
    assessment: Optional[MatchAssessment] = None
    options: List[BulletOption] = Field(default_factory=list)
    last_error: Optional[str] = None
    last_summary: str = ""


class StartCycle(BaseModel):
    type: Literal["start_cycle"] = "start_cycle"


class CycleSucceeded(BaseModel):
    type: Literal["cycle_succeeded"] = "cycle_succeeded"
    result: CycleResult


class CycleFailed(BaseModel):
    type: Literal["cycle_failed"] = "cycle_failed"
    error: str


class AssessmentRecorded(BaseModel):
    type: Literal["assessment_recorded"] = "assessment_recorded"
    result: AssessmentResult


class OptionsOffered(BaseModel):
    type: Literal["options_offered"] = "options_offered"
    options: List[BulletOption]


class OptionApplied(BaseModel):
    type: Literal["option_applied"] = "option_applied"
    result: CycleResult
    option: BulletOption


OptimizationAction = Union[
    StartCycle, CycleSucceeded, CycleFailed, AssessmentRecorded, OptionsOffered, OptionApplied
]
