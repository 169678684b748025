# tests/conftest.py

from __future__ import annotations

import logging

import pytest

from daemon_runner import RunnerOptions, TaskRunner

from .fakes import ErrorSink, FakeClock, FakeTimer


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def timer(clock: FakeClock) -> FakeTimer:
    return FakeTimer(clock)


@pytest.fixture()
def errors() -> ErrorSink:
    return ErrorSink()


@pytest.fixture()
def runner(clock: FakeClock, timer: FakeTimer, errors: ErrorSink) -> TaskRunner:
    """
    Runner wired to the fake clock/timer, auto-starting on add, ticking every 4ms.

    Use timer.advance(...) to drive it.
    """
    return TaskRunner(
        RunnerOptions(start_on_add=True, tick_ms=4, on_error=errors),
        clock=clock,
        timer=timer,
    )


@pytest.fixture()
def restore_root_logging():
    """Undo setup_logging() side effects on the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
        if h not in handlers:
            h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)
