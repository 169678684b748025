# src/daemon_runner/core/clock.py

"""
Default Clock and TimerFacility implementations.

- now(): monotonic milliseconds since module load
- AsyncioTimer: call_later/cancel on top of the running asyncio loop
"""

from __future__ import annotations

import asyncio
import time

from .ports import TimerCallback

_LOAD_NS = time.monotonic_ns()


def now() -> float:
    """Milliseconds elapsed since this module was imported (monotonic)."""
    return (time.monotonic_ns() - _LOAD_NS) / 1e6


class AsyncioTimer:
    """
    TimerFacility backed by an asyncio event loop.

    If no loop is given, the currently running loop is looked up on every call,
    so the runner must be driven from inside that loop (RuntimeError otherwise).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def call_later(self, delay_ms: float, callback: TimerCallback) -> asyncio.TimerHandle:
        delay_s = max(0.0, float(delay_ms)) / 1000.0
        return self._get_loop().call_later(delay_s, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()
