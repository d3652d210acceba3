"""Live values and latest-value combination of async iterators.

Everything here runs on a single event loop, so the latest-value slots are
plain attributes with no locking.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET: Any = object()
_DONE: Any = object()


class Signal(Generic[T]):
    """A live value whose subscribers see the current value and every change.

    Subscribers that fall behind only see the latest value; intermediate
    values are not buffered.
    """

    def __init__(self, value: T = _UNSET):
        self._value = value
        self._version = 0 if value is _UNSET else 1
        self._changed = asyncio.Event()

    @property
    def value(self) -> T:
        if self._value is _UNSET:
            raise LookupError("Signal has no value yet")
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self._version += 1
        # Wake current waiters, then arm a fresh event for the next change
        changed, self._changed = self._changed, asyncio.Event()
        changed.set()

    async def changes(self) -> AsyncIterator[T]:
        seen = 0
        while True:
            if self._version != seen:
                seen = self._version
                yield self._value
                continue
            await self._changed.wait()


async def combine_latest(*sources: AsyncIterator[Any]) -> AsyncIterator[tuple]:
    """Yield a tuple of the latest value of every source whenever any source
    produces a value, once all of them have produced at least one.

    Each source is drained by its own task. The combination ends when every
    source is exhausted; an exception from a source is re-raised here. Closing
    the returned iterator cancels the source tasks.
    """
    queue: asyncio.Queue = asyncio.Queue()

    async def drain(index: int, source: AsyncIterator[Any]) -> None:
        try:
            async for value in source:
                await queue.put((index, value, None))
        except Exception as e:
            await queue.put((index, _DONE, e))
        else:
            await queue.put((index, _DONE, None))

    tasks = [asyncio.create_task(drain(i, s)) for i, s in enumerate(sources)]
    latest = [_UNSET] * len(sources)
    remaining = len(sources)
    try:
        while remaining:
            index, value, error = await queue.get()
            if error is not None:
                raise error
            if value is _DONE:
                remaining -= 1
                continue
            latest[index] = value
            if all(v is not _UNSET for v in latest):
                yield tuple(latest)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
