"""
Process runs.

A run executes one Process step by step on a background thread and maps the
countdown to announcements, light changes and run events. The timer core
only reports ticks; every narration decision is made here.

Only one run may be active at a time.
"""

from __future__ import annotations

import threading
import time
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from announcer.base import Announcer, LightController, LoggingAnnouncer, LoggingLightController
from announcer.narrator import NarrationPolicy, TickNarrator
from logging_setup import get_logger, Component as LogComponent
from observability.events import Component as ObsComponent, EventEmitter
from timer_core import (
    AlreadyRunning,
    CancelSignal,
    CountdownState,
    LightMode,
    PhraseKey,
    Process,
    Step,
)
from timer_core.countdown import Clock

from .presets import PresetLibrary


logger = get_logger(LogComponent.RUN_MANAGER)


class RunState(str, Enum):
    """Run states (monotonic progression)."""
    CREATED = "created"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.ABORTED, RunState.FAILED)


class UnknownProcess(KeyError):
    """No preset with the requested name."""


class ProcessRun:
    """One execution of a Process."""

    def __init__(
        self,
        run_id: str,
        process: Process,
        *,
        announcer: Announcer,
        lights: LightController,
        policy: Optional[NarrationPolicy] = None,
        emitter: Optional[EventEmitter] = None,
        cancel: Optional[CancelSignal] = None,
    ):
        self.run_id = run_id
        self.process = process
        self.announcer = announcer
        self.lights = lights
        self.policy = policy or NarrationPolicy()
        self.emitter = emitter or EventEmitter(ObsComponent.RUN_MANAGER)
        self.logger = logger.with_run(run_id)

        self.state = RunState.CREATED
        self.created_at = datetime.now(timezone.utc)
        self.started_at: Optional[datetime] = None
        self.ended_at: Optional[datetime] = None
        self.current_step_index: Optional[int] = None
        self.remaining_seconds: Optional[int] = None
        self.error: Optional[str] = None

        self._cancel = cancel or CancelSignal()
        self._thread: Optional[threading.Thread] = None
        # set once the last countdown completed; aborts are refused from then on
        self._finishing = False
        self._lock = threading.Lock()

    @property
    def current_step(self) -> Optional[Step]:
        if self.current_step_index is None:
            return None
        return self.process.step_at(self.current_step_index)

    def start(self) -> None:
        """Execute the run on a background thread."""
        if self._thread is not None:
            raise AlreadyRunning(f"run {self.run_id} was already started")
        self._thread = threading.Thread(
            target=self.execute,
            name=f"process-run-{self.run_id}",
            daemon=True,
        )
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the run thread; True once the run has finished."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self.state.is_terminal

    def abort(self) -> bool:
        """Request cancellation. False if the run already finished or is finishing."""
        with self._lock:
            if self.state.is_terminal or self._finishing:
                return False
            self._cancel.cancel()
        self.logger.info("Abort requested", step_index=self.current_step_index)
        return True

    def execute(self) -> RunState:
        """Run every step in order. Blocks until the run finishes."""
        self.state = RunState.RUNNING
        self.started_at = datetime.now(timezone.utc)
        steps = self.process.steps
        self.emitter.run_started(
            self.run_id,
            process_name=self.process.name,
            total_seconds=self.process.total_seconds,
            step_count=len(steps),
        )
        self.logger.info("Run started", process_name=self.process.name, step_count=len(steps))

        try:
            for index, step in enumerate(steps):
                if self._cancel.cancelled:
                    # aborted between steps: the next step never starts
                    return self._abort(self.current_step or step)

                self.current_step_index = index
                outcome = self._run_step(index, step)
                if outcome is CountdownState.ABORTED or not self._continue_after(index):
                    return self._abort(step)

                self.announcer.say(step.phrase(PhraseKey.COMPLETE))
                next_step = steps[index + 1] if index + 1 < len(steps) else None
                if (
                    next_step is not None
                    and next_step.light_mode is LightMode.ON
                    and step.light_mode is not LightMode.ON
                ):
                    self.announcer.say(step.phrase(PhraseKey.LIGHT_SAFE))

            return self._finish(RunState.COMPLETED)
        except Exception as e:
            self.logger.exception(
                "Run failed",
                error=str(e),
                error_type=type(e).__name__,
                step_index=self.current_step_index,
            )
            self.error = str(e)
            return self._finish(RunState.FAILED)

    def _run_step(self, index: int, step: Step) -> CountdownState:
        self.lights.set_mode(step.light_mode)
        self.emitter.step_started(
            self.run_id,
            step_index=index,
            short_name=step.short_name,
            duration_seconds=step.duration_seconds,
            light_mode=step.light_mode.value,
        )
        self.announcer.prepare(step.phrase(PhraseKey.COMPLETE))
        self.announcer.say_wait(step.phrase(PhraseKey.READY_TO_START))

        narrator = TickNarrator(step, self.announcer, self.policy)

        def on_tick(remaining: int) -> None:
            self.remaining_seconds = remaining
            narrator(remaining)

        self.remaining_seconds = step.duration_seconds
        outcome = step.run(on_tick, self._cancel)
        self.emitter.step_finished(self.run_id, index, step.short_name, outcome.value)
        self.logger.info("Step finished", step=step.short_name, state=outcome.value)
        return outcome

    def _continue_after(self, index: int) -> bool:
        """
        False if an abort arrived after the step's countdown completed.

        After the last step the run is marked finishing under the abort
        lock, so a later abort is refused instead of silently ignored.
        """
        with self._lock:
            if self._cancel.cancelled:
                return False
            if index == len(self.process) - 1:
                self._finishing = True
            return True

    def _abort(self, step: Step) -> RunState:
        self.announcer.say(step.phrase(PhraseKey.ABORTED))
        return self._finish(RunState.ABORTED)

    def _finish(self, state: RunState) -> RunState:
        self.state = state
        self.ended_at = datetime.now(timezone.utc)
        self.emitter.run_finished(self.run_id, self.process.name, state.value, detail=self.error)
        self.logger.info("Run finished", state=state.value, process_name=self.process.name)
        return state

    def to_dict(self) -> Dict[str, Any]:
        step = self.current_step
        return {
            "run_id": self.run_id,
            "process_name": self.process.name,
            "state": self.state.value,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "current_step_index": self.current_step_index,
            "current_step": step.short_name if step else None,
            "light_mode": step.light_mode.value if step else None,
            "remaining_seconds": self.remaining_seconds,
            "error": self.error,
            "steps": [
                {
                    "short_name": s.short_name,
                    "long_name": s.long_name,
                    "duration_seconds": s.duration_seconds,
                    "tweakable": s.tweakable,
                    "light_mode": s.light_mode.value,
                    "state": s.state.value,
                }
                for s in self.process.steps
            ],
        }


class RunManager:
    """Creates runs from presets and enforces one active run at a time."""

    def __init__(
        self,
        presets: PresetLibrary,
        *,
        policy: Optional[NarrationPolicy] = None,
        announcer_factory: Callable[[str], Announcer] = LoggingAnnouncer,
        lights: Optional[LightController] = None,
        emitter: Optional[EventEmitter] = None,
        clock: Clock = time.monotonic,
        signal_factory: Callable[[], CancelSignal] = CancelSignal,
    ):
        self.presets = presets
        self.policy = policy or NarrationPolicy()
        self.announcer_factory = announcer_factory
        self.lights = lights or LoggingLightController()
        self.emitter = emitter or EventEmitter(ObsComponent.RUN_MANAGER)
        self._clock = clock
        self._signal_factory = signal_factory
        self._runs: Dict[str, ProcessRun] = {}
        self._latest: Optional[str] = None
        self._lock = threading.Lock()

    def create_run(
        self,
        process_name: str,
        durations: Optional[Mapping[int, int]] = None,
    ) -> ProcessRun:
        """
        Build a run for a preset, applying duration tweaks. Not started.

        Tweaks go through Step.set_duration, so fixed steps raise
        NotTweakable and bad values raise InvalidArgument.
        """
        if process_name not in self.presets:
            raise UnknownProcess(process_name)

        process = self.presets.build(process_name, clock=self._clock)
        for index, seconds in (durations or {}).items():
            process.step_at(int(index)).set_duration(seconds)

        run_id = f"run_{uuid.uuid4().hex[:12]}"
        return ProcessRun(
            run_id,
            process,
            announcer=self.announcer_factory(run_id),
            lights=self.lights,
            policy=self.policy,
            emitter=self.emitter,
            cancel=self._signal_factory(),
        )

    def start_run(
        self,
        process_name: str,
        durations: Optional[Mapping[int, int]] = None,
    ) -> ProcessRun:
        """Create and start a run; AlreadyRunning if another run is active."""
        with self._lock:
            active = self.active_run()
            if active is not None:
                raise AlreadyRunning(f"run {active.run_id} is still active")
            run = self.create_run(process_name, durations)
            self._runs[run.run_id] = run
            self._latest = run.run_id
            run.start()
        return run

    def get_run(self, run_id: str) -> Optional[ProcessRun]:
        return self._runs.get(run_id)

    def current_run(self) -> Optional[ProcessRun]:
        """Most recently started run, active or not."""
        if self._latest is None:
            return None
        return self._runs.get(self._latest)

    def active_run(self) -> Optional[ProcessRun]:
        run = self.current_run()
        if run is not None and not run.state.is_terminal:
            return run
        return None

    def list_runs(self, state: Optional[RunState] = None) -> List[ProcessRun]:
        runs = list(self._runs.values())
        if state:
            runs = [r for r in runs if r.state == state]
        return runs
