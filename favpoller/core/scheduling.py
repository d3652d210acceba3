"""Timing helpers shared by the authentication refresher and the favorites poller."""

import asyncio
import math
import random
from collections.abc import AsyncIterator
from datetime import datetime
from numbers import Real
from typing import Any
from zoneinfo import ZoneInfo

from favpoller.config import (
    JITTER_MAX_MS,
    RUN_WINDOW_END_HOUR,
    RUN_WINDOW_START_HOUR,
    TIME_ZONE,
)

# ISO weekdays on which polling is not allowed
FRIDAY = 5
SATURDAY = 6
BLOCKED_WEEKDAYS = (FRIDAY, SATURDAY)


def resolve_interval(configured: Any, minimum: float) -> float:
    """Return the configured interval floored at ``minimum``.

    Anything that is not a finite real number (missing values, text, NaN,
    infinity, booleans) falls back to ``minimum``.
    """
    if isinstance(configured, bool) or not isinstance(configured, Real):
        return minimum
    if not math.isfinite(configured):
        return minimum
    return max(configured, minimum)


def should_run_now(now: datetime | None = None) -> bool:
    """Check whether ``now`` falls inside the polling window.

    The window is 09:00 to 22:00, Sunday through Thursday, in the reference
    time zone. Naive datetimes are taken to be UTC.
    """
    zone = ZoneInfo(TIME_ZONE)
    if now is None:
        local = datetime.now(zone)
    elif now.tzinfo is None:
        local = now.replace(tzinfo=ZoneInfo("UTC")).astimezone(zone)
    else:
        local = now.astimezone(zone)

    # Don't run on FRI/SAT
    if local.isoweekday() in BLOCKED_WEEKDAYS:
        return False
    # Don't run between 10 PM and 8:59 AM
    if local.hour < RUN_WINDOW_START_HOUR or local.hour >= RUN_WINDOW_END_HOUR:
        return False
    return True


def get_delay(rng: random.Random | None = None) -> float:
    """Sample a jitter delay in milliseconds, uniform over [0, JITTER_MAX_MS)."""
    return (rng or random).random() * JITTER_MAX_MS


async def ticks(interval_ms: float) -> AsyncIterator[int]:
    """Yield 0, 1, 2, ... immediately and then once every ``interval_ms``.

    Ticks are scheduled against the loop clock so a slow consumer does not
    make the schedule drift. Ticks missed while the consumer was busy are
    skipped rather than delivered in a burst.
    """
    if interval_ms <= 0:
        raise ValueError(f"interval_ms must be positive, got {interval_ms}")

    loop = asyncio.get_running_loop()
    period = interval_ms / 1000
    next_at = loop.time()
    tick = 0
    while True:
        delay = next_at - loop.time()
        if delay > 0:
            await asyncio.sleep(delay)
        yield tick
        tick += 1
        next_at += period
        behind = loop.time() - next_at
        if behind > 0:
            next_at += period * math.ceil(behind / period)
