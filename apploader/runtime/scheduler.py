"""Deferred task queues for single-threaded loader hosts."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

_LOG = logging.getLogger("apploader.scheduler")

TaskCallback = Callable[[], None]


@dataclass(slots=True)
class _Task:
    task_id: int
    callback: TaskCallback
    cancelled: bool = False


class DeferredTaskQueue:
    """FIFO task queue drained explicitly by the host."""

    def __init__(self) -> None:
        self._next_task_id = 1
        self._tasks: dict[int, _Task] = {}
        self._queue: deque[int] = deque()

    @property
    def pending_count(self) -> int:
        """Return count of queued tasks that will still run."""
        return sum(1 for task in self._tasks.values() if not task.cancelled)

    def call_soon(self, callback: TaskCallback) -> int:
        """Enqueue a callback to run on the next drain."""
        task_id = self._next_task_id
        self._next_task_id += 1
        self._tasks[task_id] = _Task(task_id=task_id, callback=callback)
        self._queue.append(task_id)
        return task_id

    def cancel(self, task_id: int) -> None:
        """Cancel a queued task if it exists."""
        task = self._tasks.get(task_id)
        if task is not None:
            task.cancelled = True

    def run_pending(self) -> int:
        """Run queued tasks, including ones enqueued while draining."""
        executed = 0
        while self._queue:
            task_id = self._queue.popleft()
            task = self._tasks.pop(task_id, None)
            if task is None or task.cancelled:
                continue
            task.callback()
            executed += 1
        return executed


class AsyncioTaskQueue:
    """Task queue backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._next_task_id = 1
        self._handles: dict[int, asyncio.Handle] = {}

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def pending_count(self) -> int:
        return len(self._handles)

    def call_soon(self, callback: TaskCallback) -> int:
        task_id = self._next_task_id
        self._next_task_id += 1

        def _run() -> None:
            self._handles.pop(task_id, None)
            callback()

        self._handles[task_id] = self._loop.call_soon(_run)
        return task_id

    def cancel(self, task_id: int) -> None:
        handle = self._handles.pop(task_id, None)
        if handle is not None:
            handle.cancel()


def resolve_task_queue() -> DeferredTaskQueue | AsyncioTaskQueue:
    """Bind to the running asyncio loop, else return a host-drained queue."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        _LOG.info("no running event loop; status commits wait for run_pending()")
        return DeferredTaskQueue()
    return AsyncioTaskQueue(loop)
