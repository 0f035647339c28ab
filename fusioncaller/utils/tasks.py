"""
Fire-and-forget background tasks.

Tasks are not awaited by the request that spawns them. References are kept
until each task finishes so it is not garbage collected mid-flight, and the
application drains the set on shutdown.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

from fusioncaller.utils.logger import logger


class TaskRunner:
    """Holds running background tasks."""

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        """
        Schedule a coroutine on the running loop.

        Failures are logged and not retried.

        Args:
            coro: Coroutine to run
            name: Task name used in logs

        Returns:
            asyncio.Task: The scheduled task
        """
        task = asyncio.create_task(self._run(coro, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, coro: Coroutine[Any, Any, Any], name: str) -> None:
        try:
            await coro
        except Exception as e:
            logger.error("Background task failed", task=name, error=str(e), exc_info=True)

    async def drain(self, timeout: float = 10.0) -> None:
        """
        Wait for running tasks, cancelling whatever is left after ``timeout``.

        Args:
            timeout: Seconds to wait before cancelling
        """
        if not self._tasks:
            return

        logger.info("Draining background tasks", count=len(self._tasks))
        _, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning("Cancelled background tasks on shutdown", count=len(pending))
            await asyncio.gather(*pending, return_exceptions=True)


_task_runner: TaskRunner | None = None


def get_task_runner() -> TaskRunner:
    global _task_runner
    if _task_runner is None:
        _task_runner = TaskRunner()
    return _task_runner


def set_task_runner(runner: TaskRunner | None) -> None:
    global _task_runner
    _task_runner = runner
