"""Background task runner abstraction.

Provides a protocol for submitting and tracking detached background
tasks, with an in-process asyncio implementation.  The runner is the
error boundary for everything it runs: an exception escaping a task is
logged and recorded, never re-raised into the event loop.
"""

import asyncio
import enum
import uuid
from collections import deque
from collections.abc import Coroutine
from typing import Any, Protocol

from loguru import logger


class TaskStatus(enum.StrEnum):
    """Status of a background task."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class BackgroundTaskRunner(Protocol):
    """Protocol for background task execution."""

    def submit_task(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> str:
        """Submit an async task for background execution.

        Args:
            coro: The coroutine to execute.
            name: Optional label used in log messages.

        Returns:
            A task ID string for tracking.
        """
        ...

    def get_status(self, task_id: str) -> TaskStatus:
        """Get the current status of a background task.

        Args:
            task_id: The task ID returned by submit_task.

        Returns:
            The current task status.
        """
        ...


class InProcessTaskRunner:
    """In-process background task runner using asyncio.

    Tasks run in the same process as the API server using
    asyncio.create_task().  References to running tasks are held until
    they finish so they cannot be garbage collected mid-flight.  Only the
    most recent ``max_finished`` finished tasks keep a queryable status.
    """

    def __init__(self, max_finished: int = 1000) -> None:
        self._statuses: dict[str, TaskStatus] = {}
        self._tasks: dict[str, asyncio.Task[Any]] = {}
        self._finished: deque[str] = deque()
        self._max_finished = max_finished

    def submit_task(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> str:
        """Submit an async task for background execution.

        Args:
            coro: The coroutine to execute.
            name: Optional label used in log messages.

        Returns:
            A task ID string for tracking.
        """
        task_id = str(uuid.uuid4())
        label = name or task_id
        self._statuses[task_id] = TaskStatus.PENDING

        async def _run() -> None:
            self._statuses[task_id] = TaskStatus.RUNNING
            try:
                await coro
                self._statuses[task_id] = TaskStatus.COMPLETED
            except Exception:
                self._statuses[task_id] = TaskStatus.FAILED
                logger.exception(f"Background task {label} failed")

        task = asyncio.create_task(_run(), name=label)
        self._tasks[task_id] = task
        task.add_done_callback(lambda _: self._forget(task_id))
        return task_id

    def _forget(self, task_id: str) -> None:
        self._tasks.pop(task_id, None)
        self._finished.append(task_id)
        while len(self._finished) > self._max_finished:
            self._statuses.pop(self._finished.popleft(), None)

    def get_status(self, task_id: str) -> TaskStatus:
        """Get the current status of a background task.

        Args:
            task_id: The task ID returned by submit_task.

        Returns:
            The current task status.

        Raises:
            KeyError: If the task ID is unknown or its status was pruned.
        """
        return self._statuses[task_id]

    @property
    def active_count(self) -> int:
        """Number of tasks that have not finished yet."""
        return len(self._tasks)


# Singleton instance for the application
task_runner = InProcessTaskRunner()
