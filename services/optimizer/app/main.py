from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram, make_asgi_app
from pydantic import BaseModel, Field

from libs.core import logging as core_logging
from libs.core.models import (
    AssessmentResult,
    BulletOption,
    CycleResult,
    Document,
    MatchAssessment,
    OptimizationState,
)
from optimizer_core import (
    OptimizerError,
    OptimizerSettings,
    SessionRegistry,
    build_controller,
    create_provider_from_env,
    create_score_provider_from_env,
)


core_logging.configure_logging("optimizer")
LOGGER = core_logging.get_logger("optimizer")

app = FastAPI(title="Document Optimization Service")

cors_origins = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

cycles_total = Counter(
    "optimizer_cycles_total", "Optimization cycles run", ["strategy", "outcome"]
)
options_applied_total = Counter("optimizer_options_applied_total", "Bullet options applied")
cycle_score = Histogram(
    "optimizer_cycle_score",
    "Score after each recorded iteration",
    buckets=(10, 20, 30, 40, 50, 60, 70, 80, 90, 95, 98, 100),
)

app.state.provider = create_provider_from_env()
app.state.score_provider = create_score_provider_from_env()
app.state.settings = OptimizerSettings.from_env()


def _new_controller():
    return build_controller(
        app.state.provider, app.state.score_provider, settings=app.state.settings
    )


app.state.sessions = SessionRegistry(_new_controller)


class RunCycleRequest(BaseModel):
    document: Document
    target_description: Optional[str] = None
    iteration_count: int = Field(default=0, ge=0)


class AssessRequest(BaseModel):
    document: Document
    target_description: Optional[str] = None
    iteration_count: Optional[int] = Field(default=None, ge=0)


class GenerateOptionsRequest(BaseModel):
    document: Document
    target_description: Optional[str] = None
    gaps: Optional[List[str]] = None
    assessment: MatchAssessment


class GenerateOptionsResponse(BaseModel):
    options: List[BulletOption]


class ApplyOptionRequest(BaseModel):
    document: Document
    option: BulletOption
    target_description: Optional[str] = None
    prior_assessment: Optional[MatchAssessment] = None
    iteration_count: Optional[int] = Field(default=None, ge=0)


class CreateSessionRequest(BaseModel):
    document: Document
    target_description: Optional[str] = None


class SessionResponse(BaseModel):
    session_id: str
    state: OptimizationState
    history: List[Dict[str, Any]]


def _http_error(error: OptimizerError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.detail)


def _target(document: Document, target_description: Optional[str]) -> str:
    return document.target_description if target_description is None else target_description


def _observe(result: CycleResult) -> None:
    strategy = result.strategy.value if result.strategy is not None else "none"
    outcome = "target_reached" if result.target_reached else "continue"
    cycles_total.labels(strategy=strategy, outcome=outcome).inc()
    cycle_score.observe(result.assessment.score)


def _session_response(session) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        state=session.state,
        history=session.history.as_dicts(),
    )


@app.post("/cycles", response_model=CycleResult)
async def run_cycle_endpoint(request: RunCycleRequest) -> CycleResult:
    controller = _new_controller()
    strategy = "major_rewrite" if request.iteration_count == 0 else "gap_targeted"
    try:
        result = await controller.run_cycle(
            request.document,
            _target(request.document, request.target_description),
            request.iteration_count,
        )
    except OptimizerError as exc:
        cycles_total.labels(strategy=strategy, outcome="failed").inc()
        raise _http_error(exc) from exc
    _observe(result)
    return result


@app.post("/assessments", response_model=AssessmentResult)
async def assess_endpoint(request: AssessRequest) -> AssessmentResult:
    controller = _new_controller()
    try:
        result = await controller.assess(
            request.document,
            _target(request.document, request.target_description),
            request.iteration_count,
        )
    except OptimizerError as exc:
        raise _http_error(exc) from exc
    cycle_score.observe(result.assessment.score)
    return result


@app.post("/options", response_model=GenerateOptionsResponse)
async def generate_options_endpoint(request: GenerateOptionsRequest) -> GenerateOptionsResponse:
    controller = _new_controller()
    gaps = request.assessment.gaps if request.gaps is None else request.gaps
    try:
        options = await controller.generate_options(
            request.document,
            _target(request.document, request.target_description),
            gaps,
            request.assessment,
        )
    except OptimizerError as exc:
        raise _http_error(exc) from exc
    return GenerateOptionsResponse(options=options)


@app.post("/options/apply", response_model=CycleResult)
async def apply_option_endpoint(request: ApplyOptionRequest) -> CycleResult:
    controller = _new_controller()
    try:
        result = await controller.apply_option(
            request.document,
            request.option,
            target_description=_target(request.document, request.target_description),
            prior_assessment=request.prior_assessment,
            iteration_count=request.iteration_count,
        )
    except OptimizerError as exc:
        cycles_total.labels(strategy="option_applied", outcome="failed").inc()
        raise _http_error(exc) from exc
    options_applied_total.inc()
    _observe(result)
    return result


@app.post("/sessions", response_model=SessionResponse)
def create_session_endpoint(request: CreateSessionRequest) -> SessionResponse:
    session = app.state.sessions.create(request.document, request.target_description)
    return _session_response(session)


@app.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session_endpoint(session_id: str) -> SessionResponse:
    try:
        session = app.state.sessions.get(session_id)
    except OptimizerError as exc:
        raise _http_error(exc) from exc
    return _session_response(session)


@app.post("/sessions/{session_id}/cycles", response_model=SessionResponse)
async def run_session_cycle_endpoint(session_id: str) -> SessionResponse:
    try:
        session = app.state.sessions.get(session_id)
        strategy = "major_rewrite" if session.state.iteration_count == 0 else "gap_targeted"
        result = await session.run_cycle()
    except OptimizerError as exc:
        if exc.status_code in (422, 502):
            cycles_total.labels(strategy=strategy, outcome="failed").inc()
        raise _http_error(exc) from exc
    _observe(result)
    return _session_response(session)


@app.post("/sessions/{session_id}/assessments", response_model=SessionResponse)
async def assess_session_endpoint(session_id: str) -> SessionResponse:
    try:
        session = app.state.sessions.get(session_id)
        result = await session.assess()
    except OptimizerError as exc:
        raise _http_error(exc) from exc
    cycle_score.observe(result.assessment.score)
    return _session_response(session)


@app.post("/sessions/{session_id}/options", response_model=SessionResponse)
async def generate_session_options_endpoint(session_id: str) -> SessionResponse:
    try:
        session = app.state.sessions.get(session_id)
        await session.generate_options()
    except OptimizerError as exc:
        raise _http_error(exc) from exc
    return _session_response(session)


@app.post("/sessions/{session_id}/options/{option_index}/apply", response_model=SessionResponse)
async def apply_session_option_endpoint(session_id: str, option_index: int) -> SessionResponse:
    try:
        session = app.state.sessions.get(session_id)
        result = await session.apply_option(option_index)
    except OptimizerError as exc:
        raise _http_error(exc) from exc
    options_applied_total.inc()
    _observe(result)
    return _session_response(session)
