from dataclasses import asdict
from typing import Annotated, Literal, Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from app.sessions import Session, SessionRegistry
from linalyze.classifier import classify
from linalyze.elimination import solve_system
from linalyze.geometry import find_intersection_point, find_line_intersection
from linalyze.matrix_ops import ensure_supported
from linalyze.models import (
    VARIABLE_NAMES,
    AddMultiple,
    EliminationMode,
    Scale,
    SolutionType,
    SolverConfig,
    Swap,
)
from linalyze.parsing import parse_scalar, parse_system
from linalyze.playback import AutoSolver
from linalyze.timeline import operation_to_dict

app = FastAPI(title="Linalyze API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

sessions = SessionRegistry()


# ── Request models ──────────────────────────────────────────────────────

class SystemInput(BaseModel):
    matrix: Optional[list[list[float]]] = None
    equations: Optional[str] = None


class ConfigInput(BaseModel):
    partial_pivoting: bool = True
    mode: Literal["ref", "rref"] = "rref"


class SolveRequest(SystemInput, ConfigInput):
    pass


class SwapInput(BaseModel):
    type: Literal["swap"]
    row1: int
    row2: int


class ScaleInput(BaseModel):
    type: Literal["scale"]
    row: int
    scalar: Union[float, str]


class AddMultipleInput(BaseModel):
    type: Literal["add_multiple"]
    target_row: int
    source_row: int
    scalar: Union[float, str]


OperationInput = Annotated[
    Union[SwapInput, ScaleInput, AddMultipleInput], Field(discriminator="type")
]


class OperationRequest(BaseModel):
    operation: OperationInput


class JumpRequest(BaseModel):
    index: int


# ── Response models ─────────────────────────────────────────────────────

class StepInfo(BaseModel):
    step_index: int
    phase: str
    matrix: list[list[float]]
    operation: Optional[dict]
    explanation: str
    formula: str


class SolveResponse(BaseModel):
    variables: list[str]
    steps: list[StepInfo]
    solution_type: str
    solution: Optional[list[float]]
    parametric: Optional[str]
    rref: list[list[float]]
    runtime_ms: float


class SnapshotInfo(BaseModel):
    matrix: list[list[float]]
    operation: Optional[dict]
    explanation: str
    formula: str
    planes: list[dict]


class SessionResponse(BaseModel):
    id: str
    variables: list[str]
    present: SnapshotInfo
    timeline: list[str]
    current_step: int
    total_steps: int
    can_undo: bool
    can_redo: bool
    solution_type: str
    intersection: Optional[list[float]]


# ── Helpers ─────────────────────────────────────────────────────────────

def _read_system(payload: SystemInput) -> tuple:
    if payload.equations and payload.equations.strip():
        matrix, variables = parse_system(payload.equations)
        return ensure_supported(matrix), variables
    if payload.matrix is None:
        raise ValueError("Provide either 'matrix' or 'equations'.")
    matrix = ensure_supported(payload.matrix)
    return matrix, list(VARIABLE_NAMES[:len(matrix[0]) - 1])


def _config(payload: ConfigInput) -> SolverConfig:
    return SolverConfig(payload.partial_pivoting, EliminationMode(payload.mode))


def _to_operation(item):
    if isinstance(item, SwapInput):
        if item.row1 == item.row2:
            raise ValueError("Choose two different rows to swap.")
        return Swap(item.row1, item.row2)
    if isinstance(item, ScaleInput):
        return Scale(item.row, parse_scalar(str(item.scalar)))
    if isinstance(item, AddMultipleInput):
        if item.target_row == item.source_row:
            raise ValueError("Target and source rows must differ.")
        return AddMultiple(item.target_row, item.source_row, parse_scalar(str(item.scalar)))
    raise TypeError(f"Unknown operation payload: {item!r}")


def _snapshot_info(snapshot) -> SnapshotInfo:
    return SnapshotInfo(
        matrix=[list(row) for row in snapshot.matrix],
        operation=operation_to_dict(snapshot.operation) if snapshot.operation else None,
        explanation=snapshot.explanation,
        formula=snapshot.formula,
        planes=[asdict(p) for p in snapshot.planes],
    )


def _session_response(session: Session) -> SessionResponse:
    timeline = session.timeline
    present = timeline.present
    solution_type = classify(present.matrix)
    intersection = None
    if solution_type is SolutionType.UNIQUE:
        num_vars = len(present.matrix[0]) - 1
        if num_vars == 3:
            intersection = find_intersection_point(present.planes)
        elif num_vars == 2:
            intersection = find_line_intersection(present.planes)
    return SessionResponse(
        id=session.id,
        variables=session.variables,
        present=_snapshot_info(present),
        timeline=[s.explanation for s in timeline.snapshots],
        current_step=timeline.current_step,
        total_steps=timeline.total_steps,
        can_undo=timeline.can_undo,
        can_redo=timeline.can_redo,
        solution_type=solution_type.value,
        intersection=list(intersection) if intersection else None,
    )


def _get_session(session_id: str) -> Session:
    try:
        return sessions.get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")


# ── Endpoints ───────────────────────────────────────────────────────────

@app.post("/api/solve", response_model=SolveResponse)
def solve(req: SolveRequest):
    try:
        matrix, variables = _read_system(req)
        result = solve_system(matrix, _config(req), variables)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Solver error: {str(e)}")

    return SolveResponse(
        variables=variables,
        steps=[
            StepInfo(
                step_index=s.step_index,
                phase=s.phase.value,
                matrix=[list(row) for row in s.matrix],
                operation=operation_to_dict(s.operation) if s.operation else None,
                explanation=s.explanation,
                formula=s.formula,
            )
            for s in result.steps
        ],
        solution_type=result.solution_type.value,
        solution=list(result.solution) if result.solution is not None else None,
        parametric=result.parametric,
        rref=[list(row) for row in result.rref],
        runtime_ms=result.runtime_ms,
    )


@app.post("/api/sessions", response_model=SessionResponse, status_code=201)
def create_session(req: SystemInput):
    try:
        matrix, variables = _read_system(req)
        session = sessions.create(matrix, variables)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _session_response(session)


@app.get("/api/sessions/{session_id}", response_model=SessionResponse)
def get_session(session_id: str):
    session = _get_session(session_id)
    with session.lock:
        return _session_response(session)


@app.delete("/api/sessions/{session_id}", status_code=204)
def delete_session(session_id: str):
    if not sessions.delete(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")


@app.post("/api/sessions/{session_id}/operations", response_model=SessionResponse)
def apply_operation(session_id: str, req: OperationRequest):
    session = _get_session(session_id)
    with session.lock:
        try:
            session.timeline.apply_operation(_to_operation(req.operation))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _session_response(session)


@app.post("/api/sessions/{session_id}/undo", response_model=SessionResponse)
def undo(session_id: str):
    session = _get_session(session_id)
    with session.lock:
        session.timeline.undo()
        return _session_response(session)


@app.post("/api/sessions/{session_id}/redo", response_model=SessionResponse)
def redo(session_id: str):
    session = _get_session(session_id)
    with session.lock:
        session.timeline.redo()
        return _session_response(session)


@app.post("/api/sessions/{session_id}/jump", response_model=SessionResponse)
def jump(session_id: str, req: JumpRequest):
    session = _get_session(session_id)
    with session.lock:
        session.timeline.jump_to(req.index)
        return _session_response(session)


@app.post("/api/sessions/{session_id}/reset", response_model=SessionResponse)
def reset(session_id: str, req: SystemInput):
    session = _get_session(session_id)
    with session.lock:
        try:
            matrix, variables = _read_system(req)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        session.timeline.reset(matrix)
        session.variables = variables
        return _session_response(session)


@app.post("/api/sessions/{session_id}/autosolve", response_model=SessionResponse)
def autosolve(session_id: str, req: ConfigInput):
    session = _get_session(session_id)
    with session.lock:
        solver = AutoSolver(session.timeline, _config(req))
        solver.start()
        solver.play(sleep=lambda _: None)
        return _session_response(session)
