# src/daemon_runner/tasks/task_queue.py

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any, Callable

from .task_models import AddOptions, Task, coerce_options

logger = logging.getLogger(__name__)


class TaskQueue:
    """
    Insertion-ordered task container.

    - add() is idempotent per (callback, interval_ms): a duplicate returns the existing task
    - membership/removal is by identity, never by equality
    - the O(n) scans are fine at the expected size (tens of tasks)
    """

    def __init__(self) -> None:
        self._items: list[Task] = []

    def add(self, callback: Callable[..., Any], options: AddOptions = None) -> tuple[Task, bool]:
        opts = coerce_options(options)
        for task in self._items:
            if task.matches(callback, opts.interval_ms):
                logger.debug("Task %s (interval=%sms) already queued", task.name, opts.interval_ms)
                return task, False

        task = Task.from_options(callback, opts)
        self._items.append(task)
        return task, True

    def remove(self, task: Task) -> bool:
        for i, item in enumerate(self._items):
            if item is task:
                del self._items[i]
                return True
        return False

    def snapshot(self) -> list[Task]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, task: object) -> bool:
        return any(item is task for item in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Task]:
        return iter(self.snapshot())
