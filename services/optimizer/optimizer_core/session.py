from __future__ import annotations

import asyncio
import uuid
from typing import Callable, Dict, Optional, Union

from libs.core import events, logging as core_logging
from libs.core.models import (
    AssessmentRecorded,
    AssessmentResult,
    BulletOption,
    CycleFailed,
    CycleResult,
    CycleSucceeded,
    Document,
    OptimizationAction,
    OptimizationState,
    OptionApplied,
    OptionsOffered,
    StartCycle,
)

from .config import OptimizerSettings
from .controller import OptimizationController
from .errors import OptimizerError, SessionStateError
from .history import HistoryLog
from .reducer import reduce

LOGGER = core_logging.get_logger("optimizer")


class OptimizationSession:
    """Caller-side owner of one document's optimization state.

    Allows at most one operation in flight and only offers manual options inside the
    configured score window. The controller itself enforces neither.
    """

    def __init__(
        self,
        session_id: str,
        document: Document,
        controller: OptimizationController,
        *,
        target_description: Optional[str] = None,
        settings: Optional[OptimizerSettings] = None,
    ) -> None:
        self.session_id = session_id
        self.controller = controller
        self.settings = settings or controller.settings
        target = document.target_description if target_description is None else target_description
        self._state = OptimizationState(
            document=document.model_copy(deep=True), target_description=target
        )
        self._lock = asyncio.Lock()

    @property
    def state(self) -> OptimizationState:
        return self._state

    @property
    def history(self) -> HistoryLog:
        return self.controller.history

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def _reject(self, detail: str) -> SessionStateError:
        core_logging.log_event(
            LOGGER,
            events.SESSION_REJECTED,
            {"session_id": self.session_id, "status": self._state.status.value, "reason": detail},
        )
        return SessionStateError(detail)

    def _dispatch(self, action: OptimizationAction) -> OptimizationState:
        self._state = reduce(
            self._state, action, auto_target_score=self.settings.auto_target_score
        )
        return self._state

    async def run_cycle(self) -> CycleResult:
        if self.busy:
            raise self._reject("operation_in_flight")
        async with self._lock:
            self._dispatch(StartCycle())
            state = self._state
            try:
                result = await self.controller.run_cycle(
                    state.document, state.target_description, state.iteration_count
                )
            except Exception as exc:
                if isinstance(exc, OptimizerError):
                    detail = exc.detail
                else:
                    detail = f"{type(exc).__name__}:{exc}"
                self._dispatch(CycleFailed(error=detail))
                raise
            self._dispatch(CycleSucceeded(result=result))
            return result

    async def assess(self) -> AssessmentResult:
        if self.busy:
            raise self._reject("operation_in_flight")
        async with self._lock:
            state = self._state
            result = await self.controller.assess(
                state.document, state.target_description, state.iteration_count
            )
            self._dispatch(AssessmentRecorded(result=result))
            return result

    async def generate_options(self) -> list[BulletOption]:
        if self.busy:
            raise self._reject("operation_in_flight")
        assessment = self._state.assessment
        if assessment is None:
            raise self._reject("no_assessment")
        low = self.settings.manual_min_score
        high = self.settings.manual_target_score
        if not low <= assessment.score < high:
            raise self._reject(f"score_outside_manual_window:{assessment.score}")
        async with self._lock:
            state = self._state
            options = await self.controller.generate_options(
                state.document, state.target_description, assessment.gaps, assessment
            )
            self._dispatch(OptionsOffered(options=options))
            return options

    async def apply_option(self, option: Union[BulletOption, int]) -> CycleResult:
        if self.busy:
            raise self._reject("operation_in_flight")
        offered = self._state.options
        if isinstance(option, int):
            if option < 0 or option >= len(offered):
                raise self._reject(f"option_index_out_of_range:{option}")
            option = offered[option]
        elif option not in offered:
            raise self._reject("option_not_offered")
        async with self._lock:
            state = self._state
            result = await self.controller.apply_option(
                state.document,
                option,
                target_description=state.target_description,
                prior_assessment=state.assessment,
                iteration_count=state.iteration_count,
            )
            self._dispatch(OptionApplied(result=result, option=option))
            return result


class SessionRegistry:
    """In-memory sessions keyed by id; nothing survives a restart."""

    def __init__(self, controller_factory: Callable[[], OptimizationController]) -> None:
        self._controller_factory = controller_factory
        self._sessions: Dict[str, OptimizationSession] = {}

    def create(
        self, document: Document, target_description: Optional[str] = None
    ) -> OptimizationSession:
        session_id = str(uuid.uuid4())
        session = OptimizationSession(
            session_id,
            document,
            self._controller_factory(),
            target_description=target_description,
        )
        self._sessions[session_id] = session
        core_logging.log_event(
            LOGGER,
            events.SESSION_CREATED,
            {
                "session_id": session_id,
                "experience_entries": len(document.experience_entries),
                "skill_groups": len(document.skill_groups),
            },
        )
        return session

    def get(self, session_id: str) -> OptimizationSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise OptimizerError("session_not_found", status_code=404)
        return session

    def __len__(self) -> int:
        return len(self._sessions)
