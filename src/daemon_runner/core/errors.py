# src/daemon_runner/core/errors.py

from __future__ import annotations

"""
Error taxonomy.

Failures inside task callbacks never propagate out of the tick; they are wrapped
in one of these and handed to the runner's on_error hook.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..tasks.task_models import Task


class RunnerError(Exception):
    """Base class for everything the runner raises or reports."""


class InvalidTaskOptionsError(RunnerError, ValueError):
    """Bad arguments passed to TaskRunner.add()."""


class TaskFailedError(RunnerError):
    """A task callback raised, or its pending result failed."""

    def __init__(self, task: Task, cause: BaseException) -> None:
        super().__init__(f"task {task.name} failed: {cause!r}")
        self.task = task
        self.cause = cause


class RunnerStoppedError(RunnerError):
    """A pending result failed after the runner was stopped; its continuation was dropped."""

    def __init__(self, task: Task, cause: BaseException) -> None:
        super().__init__(f"runner is stopped; task {task.name} failed: {cause!r}")
        self.task = task
        self.cause = cause
