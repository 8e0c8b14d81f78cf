"""
Control API for process runs.

This module exposes:
- Read API: list presets, get run status, query run events
- Write API: start a run (with duration tweaks), abort a run

Write commands emit auditable events: control.command_received /
control.command_applied.
"""

from __future__ import annotations

import time
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from announcer.narrator import NarrationPolicy
from observability.event_store import event_store
from observability.events import Component as ObsComponent, EventEmitter, Severity
from timer_core import (
    AlreadyRunning,
    EmptyProcess,
    IndexOutOfRange,
    InvalidArgument,
    NotTweakable,
)

from .config import get_config
from .presets import load_presets
from .runner import RunManager, UnknownProcess


router = APIRouter(prefix="/control", tags=["control"])
emitter = EventEmitter(ObsComponent.CONTROL_PLANE)


def get_run_manager() -> RunManager:
    """
    FastAPI dependency returning the process-wide RunManager.

    Built lazily from TimerConfig; tests override it via
    app.dependency_overrides.
    """
    global _run_manager
    if _run_manager is None:
        config = get_config()
        _run_manager = RunManager(
            load_presets(config.presets_path),
            policy=NarrationPolicy(
                interval_seconds=config.announce_interval_seconds,
                final_interval_seconds=config.final_interval_seconds,
                final_countdown_seconds=config.final_countdown_seconds,
            ),
        )
    return _run_manager


_run_manager: Optional[RunManager] = None


class StepInfo(BaseModel):
    long_name: str
    short_name: str
    duration_seconds: int
    tweakable: bool
    light_mode: str


class ProcessInfo(BaseModel):
    name: str
    total_seconds: int
    steps: List[StepInfo]


class StartRunRequest(BaseModel):
    process: str = Field(..., min_length=1, description="Preset process name")
    durations: Dict[int, int] = Field(
        default_factory=dict,
        description="Duration overrides for tweakable steps, keyed by step index",
    )


class RunStepStatus(StepInfo):
    state: str


class RunStatus(BaseModel):
    run_id: str
    process_name: str
    state: str
    created_at: str
    started_at: Optional[str] = None
    ended_at: Optional[str] = None
    current_step_index: Optional[int] = None
    current_step: Optional[str] = None
    light_mode: Optional[str] = None
    remaining_seconds: Optional[int] = None
    error: Optional[str] = None
    steps: List[RunStepStatus] = Field(default_factory=list)


class AbortResponse(BaseModel):
    status: str
    run_id: str


def _new_correlation_id() -> str:
    return f"cmd_{int(time.time() * 1000)}"


def _status(run) -> RunStatus:
    return RunStatus(**run.to_dict())


@router.get("/processes", response_model=List[ProcessInfo])
async def list_processes(manager: RunManager = Depends(get_run_manager)) -> List[ProcessInfo]:
    """List preset processes and their steps."""
    result = []
    for name in manager.presets.names():
        process = manager.presets.build(name)
        result.append(ProcessInfo(
            name=process.name,
            total_seconds=process.total_seconds,
            steps=[
                StepInfo(
                    long_name=s.long_name,
                    short_name=s.short_name,
                    duration_seconds=s.duration_seconds,
                    tweakable=s.tweakable,
                    light_mode=s.light_mode.value,
                )
                for s in process.steps
            ],
        ))
    return result


@router.post("/runs", response_model=RunStatus, status_code=201)
async def start_run(
    req: StartRunRequest,
    manager: RunManager = Depends(get_run_manager),
) -> RunStatus:
    """Start a run of a preset process."""
    correlation_id = _new_correlation_id()
    emitter.emit(
        "control.command_received",
        run_id="-",
        correlation_id=correlation_id,
        command="run.start",
        process_name=req.process,
    )

    def _rejected(status_code: int, detail: str, error: Exception) -> HTTPException:
        emitter.emit(
            "control.command_applied",
            run_id="-",
            severity=Severity.WARN,
            correlation_id=correlation_id,
            command="run.start",
            result="rejected",
            error_class=type(error).__name__,
        )
        return HTTPException(status_code=status_code, detail=detail)

    try:
        run = manager.start_run(req.process, req.durations)
    except UnknownProcess as e:
        raise _rejected(404, f"Unknown process: {req.process}", e)
    except IndexOutOfRange as e:
        raise _rejected(404, str(e), e)
    except AlreadyRunning as e:
        raise _rejected(409, str(e), e)
    except (NotTweakable, InvalidArgument, EmptyProcess) as e:
        raise _rejected(400, str(e), e)

    emitter.emit(
        "control.command_applied",
        run_id=run.run_id,
        correlation_id=correlation_id,
        command="run.start",
        result="ok",
    )
    return _status(run)


@router.get("/runs/current", response_model=RunStatus)
async def get_current_run(manager: RunManager = Depends(get_run_manager)) -> RunStatus:
    """Status of the most recent run."""
    run = manager.current_run()
    if not run:
        raise HTTPException(status_code=404, detail="No run yet")
    return _status(run)


@router.get("/runs/{run_id}", response_model=RunStatus)
async def get_run(run_id: str, manager: RunManager = Depends(get_run_manager)) -> RunStatus:
    run = manager.get_run(run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Run not found")
    return _status(run)


@router.post("/runs/{run_id}/abort", response_model=AbortResponse)
async def abort_run(run_id: str, manager: RunManager = Depends(get_run_manager)) -> AbortResponse:
    """
    Abort a run. The countdown wakes immediately and the run ends ABORTED.

    Aborting a finished run is a 409.
    """
    run = manager.get_run(run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Run not found")

    correlation_id = _new_correlation_id()
    emitter.emit(
        "control.command_received",
        run_id=run_id,
        correlation_id=correlation_id,
        command="run.abort",
    )

    if not run.abort():
        emitter.emit(
            "control.command_applied",
            run_id=run_id,
            severity=Severity.WARN,
            correlation_id=correlation_id,
            command="run.abort",
            result="rejected",
            run_state=run.state.value,
        )
        raise HTTPException(status_code=409, detail="run_already_finished")

    emitter.emit(
        "control.command_applied",
        run_id=run_id,
        correlation_id=correlation_id,
        command="run.abort",
        result="ok",
    )
    return AbortResponse(status="ok", run_id=run_id)


@router.get("/runs/{run_id}/events")
async def get_run_events(
    run_id: str,
    event_type: Optional[str] = Query(None, description="Filter by event_type"),
    component: Optional[str] = Query(None, description="Filter by component"),
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Max events to return"),
    manager: RunManager = Depends(get_run_manager),
) -> dict:
    """Query stored events of a run."""
    if not manager.get_run(run_id):
        raise HTTPException(status_code=404, detail="Run not found")

    events = event_store.query(
        run_id=run_id,
        event_type=event_type,
        component=component,
        limit=limit,
    )
    return {
        "run_id": run_id,
        "events": events,
        "count": len(events),
    }
