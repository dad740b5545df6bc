CYCLE_STARTED = "cycle_started"
CYCLE_PHASE_CHANGED = "cycle_phase_changed"
CYCLE_SHORT_CIRCUITED = "cycle_short_circuited"
CYCLE_FINISHED = "cycle_finished"
CYCLE_FAILED = "cycle_failed"
ASSESSMENT_RECORDED = "assessment_recorded"
ORACLE_CALL_FINISHED = "oracle_call_finished"
ORACLE_CALL_FAILED = "oracle_call_failed"
OPTIONS_GENERATED = "options_generated"
OPTION_APPLIED = "option_applied"
SESSION_CREATED = "session_created"
SESSION_REJECTED = "session_rejected"

CYCLE_EVENTS = [
    CYCLE_STARTED,
    CYCLE_PHASE_CHANGED,
    CYCLE_SHORT_CIRCUITED,
    CYCLE_FINISHED,
    CYCLE_FAILED,
]
ORACLE_EVENTS = [ORACLE_CALL_FINISHED, ORACLE_CALL_FAILED]
OPTION_EVENTS = [ASSESSMENT_RECORDED, OPTIONS_GENERATED, OPTION_APPLIED]
SESSION_EVENTS = [SESSION_CREATED, SESSION_REJECTED]
