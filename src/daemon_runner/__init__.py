"""
daemon_runner: an embeddable recurring-task scheduler for asyncio applications.

    runner = TaskRunner(RunnerOptions(start_on_add=True))
    dispose = runner.add(poll_feeds, 5_000)
    ...
    dispose()
    runner.destroy()
"""

from __future__ import annotations

from .config import Settings, get_settings
from .core.clock import AsyncioTimer, now
from .core.errors import InvalidTaskOptionsError, RunnerError, RunnerStoppedError, TaskFailedError
from .logging_setup import setup_logging
from .tasks.task_models import Interval, RunnerState, Task, TaskOptions
from .tasks.task_runner import Disposer, RunnerOptions, TaskRunner

__all__ = [
    "TaskRunner",
    "RunnerOptions",
    "RunnerState",
    "Disposer",
    "Task",
    "TaskOptions",
    "Interval",
    "RunnerError",
    "InvalidTaskOptionsError",
    "TaskFailedError",
    "RunnerStoppedError",
    "AsyncioTimer",
    "now",
    "Settings",
    "get_settings",
    "setup_logging",
]
