# src/daemon_runner/tasks/task_models.py

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable, Union

from ..core.errors import InvalidTaskOptionsError


class RunnerState(StrEnum):
    """
    Runner lifecycle state.

    Notes:
    - IDLE means the queue drained on its own; the next add() wakes the runner.
    - STOPPED is terminal until destroy() resets it to READY.
    """

    READY = "ready"
    RUNNING = "running"
    IDLE = "idle"
    STOPPED = "stopped"


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


# ---- add() options: Interval | TaskOptions ----


@dataclass(slots=True, frozen=True)
class Interval:
    """Shorthand for TaskOptions(interval_ms=ms)."""

    ms: int


@dataclass(slots=True, frozen=True)
class TaskOptions:
    interval_ms: int = 0
    args: tuple[Any, ...] = ()
    scope: Any = UNSET


AddOptions = Union[None, int, Interval, TaskOptions]


def _check_interval(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidTaskOptionsError(f"interval must be an int (ms), got {value!r}")
    if value < 0:
        raise InvalidTaskOptionsError(f"interval must be >= 0, got {value}")
    return value


def coerce_options(options: AddOptions) -> TaskOptions:
    """Resolve the add() options argument into a validated TaskOptions."""
    if options is None:
        return TaskOptions()
    if isinstance(options, TaskOptions):
        _check_interval(options.interval_ms)
        if isinstance(options.args, (str, bytes, bytearray)):
            raise InvalidTaskOptionsError(f"args must be a sequence of arguments, got {options.args!r}")
        return TaskOptions(interval_ms=options.interval_ms, args=tuple(options.args), scope=options.scope)
    if isinstance(options, Interval):
        return TaskOptions(interval_ms=_check_interval(options.ms))
    if isinstance(options, int) and not isinstance(options, bool):
        return TaskOptions(interval_ms=_check_interval(options))
    raise InvalidTaskOptionsError(f"unsupported task options: {options!r}")


# ---- invocation outcome: Immediate | Deferred ----


@dataclass(slots=True, frozen=True)
class Immediate:
    value: Any = None


@dataclass(slots=True, frozen=True)
class Deferred:
    future: asyncio.Future[Any]


Outcome = Union[Immediate, Deferred]


def classify_result(value: Any) -> Outcome:
    """
    Tag a callback return value once, at the invocation boundary.

    Futures are kept as-is, concurrent futures are wrapped, any other awaitable
    (e.g. a coroutine from an async def callback) is scheduled on the running loop.
    """
    if isinstance(value, asyncio.Future):
        return Deferred(value)
    if isinstance(value, concurrent.futures.Future):
        return Deferred(asyncio.wrap_future(value))
    if inspect.isawaitable(value):
        return Deferred(asyncio.ensure_future(value))
    return Immediate(value)


# ---- task entity ----


@dataclass(slots=True, eq=False)
class Task:
    """
    One registered callback plus its schedule and runtime state.

    Compared by identity: two tasks are never "equal" unless they are the same object.
    Runtime fields (last_run_at, pending_result, continuation) are mutated only by
    the runner and its async gate.
    """

    callback: Callable[..., Any]
    interval_ms: int = 0
    args: tuple[Any, ...] = ()
    explicit_scope: Any = UNSET

    last_run_at: float | None = None
    pending_result: asyncio.Future[Any] | None = field(default=None, repr=False)
    continuation: Callable[[], None] | None = field(default=None, repr=False)

    @classmethod
    def from_options(cls, callback: Callable[..., Any], opts: TaskOptions) -> Task:
        return cls(callback=callback, interval_ms=opts.interval_ms, args=opts.args, explicit_scope=opts.scope)

    @property
    def scope(self) -> Any:
        # Unscoped tasks are their own scope.
        return self if self.explicit_scope is UNSET else self.explicit_scope

    @property
    def name(self) -> str:
        return getattr(self.callback, "__qualname__", None) or repr(self.callback)

    @property
    def is_one_shot(self) -> bool:
        return self.interval_ms == 0

    @property
    def cooldown_ms(self) -> int:
        return self.interval_ms // 2

    def matches(self, callback: Callable[..., Any], interval_ms: int) -> bool:
        return self.interval_ms == interval_ms and self.callback == callback

    def is_due(self, now_ms: float) -> bool:
        if self.last_run_at is None:
            return True
        return now_ms - self.last_run_at >= self.interval_ms

    def call(self) -> Any:
        if self.explicit_scope is UNSET:
            return self.callback(*self.args)
        return self.callback(self.explicit_scope, *self.args)
