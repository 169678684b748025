# src/daemon_runner/tasks/task_runner.py

from __future__ import annotations

"""
Task runner.

A small tick loop that:
- snapshots the queue,
- invokes every task whose interval has elapsed (one-shot tasks are dequeued first),
- hands async results to the gate so a task never overlaps itself,
- goes IDLE when the queue drains and wakes up again on add().

Timing comes from injected ports (Clock, TimerFacility); by default the running asyncio loop.
"""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable

from ..config import get_settings
from ..core.clock import AsyncioTimer, now
from ..core.errors import InvalidTaskOptionsError, RunnerError, TaskFailedError
from ..core.ports import Clock, TimerFacility
from .async_gate import AsyncGate
from .task_models import AddOptions, Deferred, Immediate, Outcome, RunnerState, Task, classify_result
from .task_queue import TaskQueue

logger = logging.getLogger(__name__)

Disposer = Callable[[], bool]


def _log_error(error: RunnerError) -> None:
    cause = getattr(error, "cause", None)
    exc_info = (type(cause), cause, cause.__traceback__) if cause is not None else None
    logger.error("%s", error, exc_info=exc_info)


@dataclass(slots=True, frozen=True)
class RunnerOptions:
    """
    Constructor options.

    None means "use the package Settings default" for start_on_add / tick_ms.
    """

    on_init: Callable[[TaskRunner], Any] | None = None
    start_on_add: bool | None = None
    tick_ms: int | None = None
    on_error: Callable[[RunnerError], Any] | None = None


class TaskRunner:
    """
    Recurring-task scheduler driven by a fixed tick.

    State machine:
        READY --start()/add() with start_on_add--> RUNNING
        RUNNING --queue drained--> IDLE --add()--> RUNNING
        RUNNING/IDLE --stop()--> STOPPED --destroy()--> READY

    All calls must happen on the thread that drives the timer (the asyncio loop thread).
    """

    def __init__(
            self,
            options: RunnerOptions | Callable[[TaskRunner], Any] | None = None,
            *,
            clock: Clock | None = None,
            timer: TimerFacility | None = None,
    ) -> None:
        if options is None:
            opts = RunnerOptions()
        elif isinstance(options, RunnerOptions):
            opts = options
        elif callable(options):
            opts = RunnerOptions(on_init=options)
        else:
            raise TypeError(f"options must be RunnerOptions or a callable, got {options!r}")

        settings = get_settings()
        self._opts = opts
        self._start_on_add = settings.start_on_add if opts.start_on_add is None else bool(opts.start_on_add)
        self._tick_ms = max(1, int(settings.tick_ms if opts.tick_ms is None else opts.tick_ms))
        self._on_error = opts.on_error or _log_error

        self._clock: Clock = clock or now
        self._timer: TimerFacility = timer or AsyncioTimer()

        self._queue = TaskQueue()
        self._gate = AsyncGate(self._timer, is_stopped=self._is_stopped, report=self._report)
        self._state = RunnerState.READY
        self._tick_handle: Any = None

        if opts.on_init is not None:
            opts.on_init(self)

    # ---- public API ----

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def tick_ms(self) -> int:
        return self._tick_ms

    @property
    def start_on_add(self) -> bool:
        return self._start_on_add

    def add(self, callback: Callable[..., Any], options: AddOptions = None) -> Disposer:
        """
        Register a callback.

        options: None (one-shot), an int / Interval (interval in ms) or TaskOptions.
        Re-adding the same (callback, interval) pair is a no-op; the returned disposer
        then refers to the already-queued task.
        """
        if not callable(callback):
            raise InvalidTaskOptionsError(f"callback must be callable, got {callback!r}")

        task, _created = self._queue.add(callback, options)

        if self._state is RunnerState.IDLE or (self._state is RunnerState.READY and self._start_on_add):
            self.start()

        return functools.partial(self._queue.remove, task)

    def size(self) -> int:
        return len(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def start(self) -> TaskRunner:
        if self._state is RunnerState.RUNNING:
            return self
        if self._state is RunnerState.STOPPED:
            logger.warning("start() ignored: runner is stopped (call destroy() to reset it)")
            return self

        self._schedule_tick(0)
        self._set_state(RunnerState.RUNNING)
        return self

    def stop(self) -> TaskRunner:
        self._cancel_tick()
        self._gate.halt()
        self._set_state(RunnerState.STOPPED)
        return self

    def destroy(self) -> None:
        self.stop()
        self._queue.clear()
        self._set_state(RunnerState.READY)

    # ---- loop ----

    def _set_state(self, state: RunnerState) -> None:
        if state is not self._state:
            logger.debug("Runner %s -> %s", self._state.value, state.value)
            self._state = state

    def _is_stopped(self) -> bool:
        return self._state is RunnerState.STOPPED

    def _schedule_tick(self, delay_ms: float) -> None:
        self._tick_handle = self._timer.call_later(delay_ms, self._tick)

    def _cancel_tick(self) -> None:
        handle, self._tick_handle = self._tick_handle, None
        if handle is not None:
            self._timer.cancel(handle)

    def _tick(self) -> None:
        self._tick_handle = None
        if self._state is not RunnerState.RUNNING:
            return

        self._run_cycle()

        # A callback may have stopped/destroyed the runner, or restarted it (new tick already armed).
        if self._state is not RunnerState.RUNNING or self._tick_handle is not None:
            return

        if not self._queue:
            self._set_state(RunnerState.IDLE)
            return

        self._schedule_tick(self._tick_ms)

    def _run_cycle(self) -> None:
        # Tasks added during this pass wait for the next tick.
        for task in self._queue.snapshot():
            if self._state is not RunnerState.RUNNING:
                break
            self._evaluate(task)

    def _evaluate(self, task: Task) -> None:
        if task not in self._queue:
            return
        if not task.is_due(self._clock()):
            return

        if self._gate.is_pending(task):
            self._gate.defer(task, functools.partial(self._resume, task))
            return

        if task.is_one_shot:
            # Dequeue before invoking: a one-shot can never be re-entered.
            self._queue.remove(task)

        outcome = self._invoke(task)
        task.last_run_at = self._clock()

        if isinstance(outcome, Deferred):
            self._gate.hold(task, outcome.future)

    def _resume(self, task: Task) -> None:
        if self._state is RunnerState.STOPPED:
            return
        self._evaluate(task)

    def _invoke(self, task: Task) -> Outcome:
        try:
            return classify_result(task.call())
        except Exception as e:
            self._report(TaskFailedError(task, e))
            return Immediate()

    def _report(self, error: RunnerError) -> None:
        try:
            self._on_error(error)
        except Exception:
            logger.exception("on_error hook failed while reporting: %s", error)
