"""
Once-semantics for lazily built async resources.

The first caller starts the build as a task; every concurrent caller awaits
that same task. A build that fails is forgotten so a later call can retry.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


def _succeeded(task: Optional[asyncio.Future]) -> bool:
    return (
        task is not None
        and task.done()
        and not task.cancelled()
        and task.exception() is None
    )


class AsyncOnce(Generic[T]):
    def __init__(self, factory: Callable[[], Awaitable[T]]) -> None:
        self._factory = factory
        self._task: Optional[asyncio.Future] = None

    @property
    def done(self) -> bool:
        return _succeeded(self._task)

    async def get(self) -> T:
        task = self._task
        if _succeeded(task):
            return task.result()

        if task is None or task.done():
            task = asyncio.ensure_future(self._factory())
            self._task = task

        try:
            # Shielded so one cancelled waiter does not cancel the shared build.
            return await asyncio.shield(task)
        except Exception:
            if self._task is task and task.done():
                self._task = None
            raise

    def peek(self) -> Optional[T]:
        """Return the built value without triggering a build."""
        return self._task.result() if _succeeded(self._task) else None

    def reset(self) -> None:
        self._task = None
