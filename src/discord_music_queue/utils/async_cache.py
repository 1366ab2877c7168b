"""A per-instance memo for one coroutine result."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class AsyncValueCache(Generic[T]):
    """Run ``factory`` at most once and hand every caller the same result.

    Concurrent ``get()`` calls share one in-flight task. A failed task is not
    kept, so the next ``get()`` tries again. ``clear()`` forgets the value.

    With ``memoize=False`` only the in-flight task is shared: once it
    finishes, the next ``get()`` runs the factory again.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]], *, memoize: bool = True) -> None:
        self._factory = factory
        self._memoize = memoize
        self._task: asyncio.Task[T] | None = None

    @property
    def has_value(self) -> bool:
        task = self._task
        return task is not None and task.done() and not task.cancelled() and task.exception() is None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def get(self) -> T:
        if self._task is None:
            self._task = asyncio.ensure_future(self._factory())
            self._task.add_done_callback(self._on_done)
        return await asyncio.shield(self._task)

    def clear(self) -> None:
        self._task = None

    def _on_done(self, task: asyncio.Task[T]) -> None:
        if self._task is not task:
            return
        if not self._memoize or task.cancelled() or task.exception() is not None:
            self._task = None
