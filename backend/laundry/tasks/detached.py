"""Detached asyncio tasks for fire-and-forget work."""

import asyncio
from collections import defaultdict
from collections.abc import Coroutine
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class DetachedTasks:
    """Runs coroutines in the background without the caller awaiting them.

    The caller gets control back immediately. Outcomes are never propagated:
    a failing task is logged and its exception discarded, a successful task's
    result is discarded. Tasks are held here until done so they cannot be
    garbage-collected mid-flight.

    Usage:
        detached = DetachedTasks()
        detached.spawn(dispatcher.dispatch(event), name="notify:ready")
        ...
        await detached.drain(timeout=10)  # On shutdown
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self._counters: dict[str, int] = defaultdict(int)

    def _task_key(self, coro: Coroutine[Any, Any, Any]) -> str:
        """Generate a human-readable key for the task."""
        name = getattr(coro, "__qualname__", None)
        if name:
            return str(name)

        code = getattr(coro, "cr_code", None)
        if code:
            return str(code.co_name)

        return "task"

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task[Any]:
        """Schedule a coroutine and return immediately.

        Must be called from within a running event loop.
        """
        key = name or self._task_key(coro)
        self._counters[key] += 1
        task_name = f"detached:{key}:{self._counters[key]}"

        task: asyncio.Task[Any] = asyncio.create_task(coro, name=task_name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Detached task cancelled", task_name=task.get_name())
            return
        error = task.exception()
        if error is not None:
            logger.warning(
                "Detached task failed",
                task_name=task.get_name(),
                error_type=type(error).__name__,
                error=str(error),
            )

    async def drain(self, *, timeout: float) -> None:
        """Wait for in-flight tasks to finish, cancelling any still running after `timeout`.

        Failures were already logged by the done callback and are not raised here.
        """
        if not self._tasks:
            return

        tasks = list(self._tasks)
        try:
            await asyncio.wait_for(asyncio.gather(*tasks, return_exceptions=True), timeout=timeout)
        except TimeoutError:
            logger.warning(
                "Detached tasks timed out, cancelling",
                timeout=timeout,
                pending=sum(1 for t in tasks if not t.done()),
            )
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
