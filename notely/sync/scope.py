"""
View Scopes.

A ViewScope ties requests to the lifetime of the view that issued them.
Closing the scope cancels its outstanding tasks and marks it closed;
synchronisation code checks ``scope.closed`` before writing a response
into a shared store, so a late response never lands after the view is gone.
"""

import asyncio
from typing import Any, Coroutine, TypeVar

from notely.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

T = TypeVar("T")


class ScopeClosedError(RuntimeError):
    """Raised when work is started on a scope that has already closed."""


class ViewScope:
    """
    Cancellation scope for one view.

    Usage:
        async with ViewScope("notes-list") as scope:
            notes = await scope.run(sync.load_notes(scope=scope))
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.closed = False
        self._tasks: set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine[Any, Any, T]) -> "asyncio.Task[T]":
        """Start coro as a task owned by this scope."""
        if self.closed:
            coro.close()
            raise ScopeClosedError(f"Scope {self.name} is closed")
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run coro inside the scope and return its result."""
        return await self.spawn(coro)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def close(self) -> None:
        """Mark the scope closed and cancel everything still running."""
        if self.closed:
            return
        self.closed = True
        if self._tasks:
            log_with_source(
                logger, "sync", "debug", "Cancelling scope tasks",
                scope=self.name, pending=len(self._tasks),
            )
        for task in list(self._tasks):
            task.cancel()

    async def aclose(self) -> None:
        """Close and wait for cancelled tasks to unwind."""
        tasks = list(self._tasks)
        self.close()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def __aenter__(self) -> "ViewScope":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def is_live(scope: ViewScope | None) -> bool:
    """True when there is no scope or the scope is still open."""
    return scope is None or not scope.closed
