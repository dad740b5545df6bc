from __future__ import annotations

from typing import Dict, Set

from .models import CyclePhase, SessionStatus

CYCLE_TRANSITIONS: Dict[CyclePhase, Set[CyclePhase]] = {
    CyclePhase.idle: {CyclePhase.scoring, CyclePhase.merging},
    CyclePhase.scoring: {
        CyclePhase.major_rewrite,
        CyclePhase.gap_targeted,
        CyclePhase.recording,
    },
    CyclePhase.major_rewrite: {CyclePhase.merging},
    CyclePhase.gap_targeted: {CyclePhase.merging},
    CyclePhase.merging: {CyclePhase.rescoring},
    CyclePhase.rescoring: {CyclePhase.recording},
    CyclePhase.recording: {CyclePhase.done, CyclePhase.continue_},
    CyclePhase.done: set(),
    CyclePhase.continue_: set(),
}

# Options are offered and applied outside of running; only cycles enter running.
SESSION_TRANSITIONS: Dict[SessionStatus, Set[SessionStatus]] = {
    SessionStatus.idle: {SessionStatus.running, SessionStatus.idle, SessionStatus.converged},
    SessionStatus.running: {SessionStatus.idle, SessionStatus.converged},
    SessionStatus.converged: {SessionStatus.converged},
}


def validate_cycle_transition(current: CyclePhase, new: CyclePhase) -> bool:
    return new in CYCLE_TRANSITIONS.get(current, set())


def validate_session_transition(current: SessionStatus, new: SessionStatus) -> bool:
    return new in SESSION_TRANSITIONS.get(current, set())
