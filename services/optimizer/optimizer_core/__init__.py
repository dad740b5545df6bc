from __future__ import annotations

from .config import OptimizerSettings, create_provider_from_env, create_score_provider_from_env
from .controller import OptimizationController
from .errors import OptimizerError, OracleError, SessionStateError, ValidationError
from .generators import BulletOptionGenerator, GapBulletGenerator
from .history import HistoryLog
from .merge import append_to_first_entry, merge
from .oracles import ContentOracle, ScoreOracle
from .reducer import reduce
from .session import OptimizationSession, SessionRegistry
from .skills import filter_new_skills, gap_keywords, skills_overlap

__all__ = [
    "OptimizerError",
    "OracleError",
    "ValidationError",
    "SessionStateError",
    "OptimizerSettings",
    "create_provider_from_env",
    "create_score_provider_from_env",
    "ScoreOracle",
    "ContentOracle",
    "GapBulletGenerator",
    "BulletOptionGenerator",
    "OptimizationController",
    "HistoryLog",
    "merge",
    "append_to_first_entry",
    "reduce",
    "OptimizationSession",
    "SessionRegistry",
    "skills_overlap",
    "filter_new_skills",
    "gap_keywords",
    "build_controller",
]


def build_controller(
    provider,
    score_provider=None,
    settings: OptimizerSettings | None = None,
) -> OptimizationController:
    settings = settings or OptimizerSettings()
    return OptimizationController(
        ScoreOracle(score_provider or provider),
        ContentOracle(provider),
        GapBulletGenerator(provider),
        BulletOptionGenerator(
            provider,
            option_count=settings.option_count,
            target_score=settings.manual_target_score,
        ),
        settings=settings,
    )
