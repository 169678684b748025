# src/daemon_runner/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the runner.

The runner depends on Protocols instead of concrete implementations.
This keeps the time source and the timer primitive swappable and makes testing easier.
"""

from typing import Any, Callable, Protocol

TimerCallback = Callable[[], None]


class Clock(Protocol):
    """Monotonic time source in milliseconds (arbitrary epoch, never goes backwards)."""
    def __call__(self) -> float: ...


class TimerFacility(Protocol):
    """
    Host-side timer primitive.

    The runner only needs two operations:
    - call_later: run a callback once after delay_ms
    - cancel: cancel a handle returned by call_later (no-op if it already fired)
    """

    def call_later(self, delay_ms: float, callback: TimerCallback) -> Any: ...
    def cancel(self, handle: Any) -> None: ...
