"""Favorites poller — fetch favorite businesses when polling is allowed.

Architecture notes:
- The enable signal, a poll ticker and the authentication stream are combined
  by latest value; every new value from any of them triggers an evaluation.
  Nothing happens until each has produced a value, so polling waits for the
  first successful login.
- Gates, in order: the enable flag, then the weekly run window
  (should_run_now). A closed gate drops the event silently.
- An event that passes both gates becomes its own task: jitter sleep, then the
  listing call with RETRY_COUNT retries. Tasks are not serialised, so a slow
  call can overlap the next tick unless prevent_overlap is set.
- Responses without items are dropped; failed calls are logged and dropped.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Mapping
from datetime import datetime
from typing import Any

from favpoller.config import RETRY_COUNT
from favpoller.core.errors import log_error
from favpoller.core.retry import with_retry
from favpoller.core.scheduling import get_delay, should_run_now, ticks
from favpoller.core.signals import Signal, combine_latest
from favpoller.services.api_client import FavoritesApi, RequestError

logger = logging.getLogger(__name__)


def extract_items(response: Any) -> Any:
    """Return the ``items`` of a listing response, or None when absent or empty.

    Lists and tuples come back as lists; any other value is passed through.
    """
    if response is None:
        return None
    if isinstance(response, Mapping):
        items = response.get("items")
    else:
        items = getattr(response, "items", None)
    if not items:
        return None
    return list(items) if isinstance(items, (list, tuple)) else items


async def favorites_stream(
    api: FavoritesApi,
    enabled: Signal[bool],
    authentications: AsyncIterator[Any],
    interval_ms: float,
    *,
    clock: Callable[[], datetime | None] = lambda: None,
    delay_ms: Callable[[], float] = get_delay,
    prevent_overlap: bool = False,
) -> AsyncIterator[list]:
    """Yield one batch of favorite items per successful poll.

    ``clock`` supplies the time checked against the run window (None means
    the current time); ``delay_ms`` supplies the jitter before each call.
    Closing the iterator cancels the ticker, the authentication stream and
    any poll still in flight.
    """
    batches: asyncio.Queue = asyncio.Queue()
    in_flight: set[asyncio.Task] = set()

    async def poll_once() -> None:
        try:
            delay = delay_ms()
            logger.debug(f"Polling favorites in {delay / 1000:.1f}s")
            await asyncio.sleep(delay / 1000)
            outcome = await with_retry(
                api.list_favorite_businesses, RETRY_COUNT + 1, retry_on=(RequestError,)
            )
            if not outcome.ok:
                log_error(outcome.error)
                return
            items = extract_items(outcome.value)
            if items is None:
                logger.debug("Favorites response had no items")
                return
            await batches.put(items)
        except Exception as e:
            log_error(e)

    async def evaluate() -> None:
        combined = combine_latest(enabled.changes(), ticks(interval_ms), authentications)
        try:
            async for is_enabled, tick, _authentication in combined:
                if not is_enabled:
                    continue
                if not should_run_now(clock()):
                    logger.debug(f"Outside run window, skipping tick {tick}", extra={"tick": tick})
                    continue
                if prevent_overlap and in_flight:
                    logger.debug(f"Previous poll still running, skipping tick {tick}")
                    continue
                task = asyncio.create_task(poll_once())
                in_flight.add(task)
                task.add_done_callback(in_flight.discard)
        finally:
            await combined.aclose()

    evaluator = asyncio.create_task(evaluate())
    getter: asyncio.Task | None = None
    try:
        while True:
            getter = asyncio.create_task(batches.get())
            await asyncio.wait({getter, evaluator}, return_when=asyncio.FIRST_COMPLETED)
            if getter.done():
                yield getter.result()
                continue
            getter.cancel()
            # The evaluator only stops when its inputs are exhausted or fail
            evaluator.result()
            return
    finally:
        pending = [evaluator, *in_flight]
        if getter is not None:
            pending.append(getter)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
