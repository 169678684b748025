# tests/fakes.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field


class FakeClock:
    """
    Manually driven millisecond clock.

    Tests (or FakeTimer.advance) move now_ms forward; nothing else does.
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms


@dataclass(slots=True)
class FakeHandle:
    due_ms: float
    seq: int
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False


@dataclass(slots=True)
class FakeTimer:
    """
    Deterministic TimerFacility.

    advance(ms) fires every due callback in (due time, scheduling order),
    moving the clock to each callback's due time before calling it.
    """

    clock: FakeClock
    handles: list[FakeHandle] = field(default_factory=list)
    _seq: int = 0

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> FakeHandle:
        self._seq += 1
        handle = FakeHandle(due_ms=self.clock.now_ms + max(0.0, float(delay_ms)), seq=self._seq, callback=callback)
        self.handles.append(handle)
        return handle

    def cancel(self, handle: FakeHandle) -> None:
        handle.cancelled = True

    @property
    def pending(self) -> list[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, ms: float) -> None:
        target = self.clock.now_ms + ms
        while True:
            due = [h for h in self.pending if h.due_ms <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.due_ms, h.seq))
            self.clock.now_ms = max(self.clock.now_ms, handle.due_ms)
            handle.fired = True
            handle.callback()
        self.clock.now_ms = max(self.clock.now_ms, target)


@dataclass(slots=True)
class ErrorSink:
    """Collects whatever the runner reports through on_error."""

    errors: list[Exception] = field(default_factory=list)

    def __call__(self, error: Exception) -> None:
        self.errors.append(error)
