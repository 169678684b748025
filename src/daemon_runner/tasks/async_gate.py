# src/daemon_runner/tasks/async_gate.py

from __future__ import annotations

"""
Async gate.

Keeps a task from being invoked again while its previous async invocation is in flight:
- hold(): remember the pending future and watch for settlement
- defer(): a tick reached the task while it was pending -> remember ONE continuation
- on settlement: report failures, wait cooldown (interval // 2), then release and run
  the continuation unless the runner is stopped

Only the gated task waits; the rest of the queue keeps running.
"""

import asyncio
import functools
import logging
from typing import Any, Callable

from ..core.errors import RunnerError, RunnerStoppedError, TaskFailedError
from ..core.ports import TimerFacility
from .task_models import Task

logger = logging.getLogger(__name__)


class AsyncGate:
    def __init__(
            self,
            timer: TimerFacility,
            *,
            is_stopped: Callable[[], bool],
            report: Callable[[RunnerError], None],
    ) -> None:
        self._timer = timer
        self._is_stopped = is_stopped
        self._report = report
        # Bumped by halt(); a future held in an older generation outlived a stop()/destroy().
        self._generation = 0

    @staticmethod
    def is_pending(task: Task) -> bool:
        return task.pending_result is not None

    @staticmethod
    def defer(task: Task, continuation: Callable[[], None]) -> None:
        # Overwrite, never stack: at most one re-evaluation per task.
        task.continuation = continuation

    def halt(self) -> None:
        self._generation += 1

    def hold(self, task: Task, future: asyncio.Future[Any]) -> None:
        task.pending_result = future
        future.add_done_callback(functools.partial(self._on_settled, task, self._generation))

    def _stopped_since(self, generation: int) -> bool:
        return self._is_stopped() or generation != self._generation

    def _on_settled(self, task: Task, generation: int, future: asyncio.Future[Any]) -> None:
        stopped = self._stopped_since(generation)
        if future.cancelled():
            logger.debug("Pending result of task %s was cancelled", task.name)
        elif future.exception() is not None:
            exc = future.exception()
            if stopped:
                self._report(RunnerStoppedError(task, exc))
            else:
                self._report(TaskFailedError(task, exc))
        elif stopped:
            logger.debug("Runner stopped; dropping result of task %s", task.name)

        cooldown = task.cooldown_ms
        if cooldown > 0:
            self._timer.call_later(cooldown, functools.partial(self._release, task, generation, future))
        else:
            self._release(task, generation, future)

    def _release(self, task: Task, generation: int, future: asyncio.Future[Any]) -> None:
        if task.pending_result is not future:
            return
        task.pending_result = None
        continuation, task.continuation = task.continuation, None

        if continuation is None:
            return
        if self._stopped_since(generation):
            logger.debug("Runner stopped; dropping continuation for task %s", task.name)
            return
        continuation()
