"""Retry wrapper for outbound API calls."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

logger = logging.getLogger(__name__)


@dataclass
class RetryOutcome:
    """Result of :func:`with_retry`: either a value or the last error."""

    value: Any = None
    error: BaseException | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


async def with_retry(
    operation: Callable[[], Awaitable[Any]],
    attempts: int,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> RetryOutcome:
    """Await ``operation()`` up to ``attempts`` times.

    Exceptions matching ``retry_on`` are retried immediately; once every attempt
    has failed the last one is returned in the outcome instead of raised, and
    logging is left to the caller. Other exceptions propagate unchanged.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            retry=retry_if_exception_type(retry_on),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            reraise=False,
        ):
            with attempt:
                value = await operation()
    except RetryError as e:
        return RetryOutcome(
            error=e.last_attempt.exception(),
            attempts=e.last_attempt.attempt_number,
        )

    return RetryOutcome(value=value, attempts=attempt.retry_state.attempt_number)
