"""
Task executors handed to the network worker.

The worker runs many small background jobs (dialing, protocol handlers,
timers). Where they run is up to the embedding application: a dedicated
thread pool, an existing asyncio loop, or anything else that can run a
coroutine. A `TaskExecutor` captures that choice behind one method.

No ordering between spawned tasks is guaranteed by any executor.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine
from concurrent.futures import Future, ThreadPoolExecutor
from types import TracebackType
from typing import Any

from .config import DEFAULT_EXECUTOR_THREADS

__all__ = [
    "Task",
    "TaskExecutor",
    "CallableExecutor",
    "ThreadPoolTaskExecutor",
    "EventLoopExecutor",
]

logger = logging.getLogger(__name__)

Task = Coroutine[Any, Any, None]
"""A deferred computation returning nothing."""


class TaskExecutor(ABC):
    """Runs deferred computations, possibly on another thread."""

    @abstractmethod
    def spawn(self, task: Task) -> None:
        """Submit a task for eventual execution. Must not block on the task."""


class CallableExecutor(TaskExecutor):
    """Adapts a plain callable, e.g. a framework's `spawn` function."""

    def __init__(self, spawn: Callable[[Task], object]) -> None:
        self._spawn = spawn

    def spawn(self, task: Task) -> None:
        self._spawn(task)

    def __repr__(self) -> str:
        return f"CallableExecutor({self._spawn!r})"


class ThreadPoolTaskExecutor(TaskExecutor):
    """
    Runs each task to completion on a worker thread with its own event loop.

    This is the fallback the worker uses when no executor is configured.
    Failures are logged, since nobody awaits the task.
    """

    def __init__(self, max_workers: int = DEFAULT_EXECUTOR_THREADS) -> None:
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="sup-network")

    def spawn(self, task: Task) -> None:
        future = self._pool.submit(asyncio.run, task)
        future.add_done_callback(self._on_task_done)

    @staticmethod
    def _on_task_done(future: Future[None]) -> None:
        """Log any exception raised by a finished task."""
        if not future.cancelled() and future.exception() is not None:
            logger.warning("Background task failed: %s", future.exception())

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting tasks and optionally wait for running ones."""
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> ThreadPoolTaskExecutor:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown(wait=True)


class EventLoopExecutor(TaskExecutor):
    """
    Schedules tasks on an existing asyncio event loop.

    `spawn` is safe to call from any thread. The executor keeps a strong
    reference to each task until it finishes.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._tasks: set[asyncio.Task[None]] = set()

    def spawn(self, task: Task) -> None:
        self._loop.call_soon_threadsafe(self._create_task, task)

    def _create_task(self, coro: Task) -> None:
        """Create a tracked task. Runs on the loop thread."""
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        """Drop the finished task and log any exception."""
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Background task failed: %s", task.exception())

    @property
    def pending(self) -> int:
        """Number of tasks created and not yet finished."""
        return len(self._tasks)
