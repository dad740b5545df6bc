from __future__ import annotations

from libs.core import state_machine
from libs.core.models import (
    AssessmentRecorded,
    CycleFailed,
    CycleSucceeded,
    OptimizationAction,
    OptimizationState,
    OptionApplied,
    OptionsOffered,
    SessionStatus,
    StartCycle,
)

from .errors import SessionStateError


def _transition(state: OptimizationState, new_status: SessionStatus, action_type: str) -> None:
    if not state_machine.validate_session_transition(state.status, new_status):
        raise SessionStateError(
            f"invalid_session_transition:{action_type}:{state.status.value}->{new_status.value}"
        )


def _require_running(state: OptimizationState) -> None:
    if state.status != SessionStatus.running:
        raise SessionStateError("no_cycle_in_flight")


def reduce(
    state: OptimizationState,
    action: OptimizationAction,
    *,
    auto_target_score: int = 95,
) -> OptimizationState:
    """Return the state that follows ``action``; ``state`` itself is never modified.

    A failed cycle only records its error: the document stays exactly as it was when the
    cycle started.
    """
    if isinstance(action, StartCycle):
        if state.status == SessionStatus.running:
            raise SessionStateError("cycle_in_flight")
        _transition(state, SessionStatus.running, action.type)
        return state.model_copy(update={"status": SessionStatus.running, "last_error": None})

    if isinstance(action, CycleSucceeded):
        _require_running(state)
        result = action.result
        new_status = SessionStatus.converged if result.target_reached else SessionStatus.idle
        _transition(state, new_status, action.type)
        return state.model_copy(
            update={
                "document": result.document,
                "status": new_status,
                "iteration_count": result.history_entry.iteration_number,
                "assessment": result.assessment,
                "options": [],
                "last_error": None,
                "last_summary": result.improvement_summary,
            }
        )

    if isinstance(action, CycleFailed):
        _require_running(state)
        _transition(state, SessionStatus.idle, action.type)
        return state.model_copy(update={"status": SessionStatus.idle, "last_error": action.error})

    if isinstance(action, AssessmentRecorded):
        if state.status == SessionStatus.running:
            raise SessionStateError("cycle_in_flight")
        result = action.result
        new_status = state.status
        if result.assessment.score >= auto_target_score:
            new_status = SessionStatus.converged
        _transition(state, new_status, action.type)
        return state.model_copy(
            update={
                "status": new_status,
                "iteration_count": result.history_entry.iteration_number,
                "assessment": result.assessment,
                "options": [],
                "last_error": None,
            }
        )

    if isinstance(action, OptionsOffered):
        _transition(state, state.status, action.type)
        return state.model_copy(update={"options": list(action.options)})

    if isinstance(action, OptionApplied):
        if state.status == SessionStatus.running:
            raise SessionStateError("cycle_in_flight")
        if action.option not in state.options:
            raise SessionStateError("option_not_offered")
        result = action.result
        new_status = state.status
        if result.assessment.score >= auto_target_score:
            new_status = SessionStatus.converged
        _transition(state, new_status, action.type)
        if result.target_reached:
            remaining = []
        else:
            remaining = [option for option in state.options if option != action.option]
        return state.model_copy(
            update={
                "document": result.document,
                "status": new_status,
                "iteration_count": result.history_entry.iteration_number,
                "assessment": result.assessment,
                "options": remaining,
                "last_error": None,
                "last_summary": result.improvement_summary,
            }
        )

    raise SessionStateError(f"unknown_action:{getattr(action, 'type', type(action).__name__)}")
