"""Authentication refresher — log in to the favorites API on a fixed interval.

Architecture notes:
- Fires immediately, then once per interval (floored at one hour by the
  pipeline).
- Each tick retries the login RETRY_COUNT more times before giving up. A tick
  whose attempts all fail is logged and produces nothing; the next tick runs
  as scheduled.
- Empty tokens are dropped without logging.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

from favpoller.config import RETRY_COUNT
from favpoller.core.errors import log_error
from favpoller.core.retry import with_retry
from favpoller.core.scheduling import ticks
from favpoller.services.api_client import FavoritesApi, RequestError

logger = logging.getLogger(__name__)


async def authentication_stream(api: FavoritesApi, interval_ms: float) -> AsyncIterator[Any]:
    """Yield a fresh authentication token on every successful tick."""
    async for tick in ticks(interval_ms):
        token = await _authenticate(api, tick)
        if not token:
            continue
        yield token


async def _authenticate(api: FavoritesApi, tick: int) -> Any:
    logger.debug(f"Authentication tick {tick}", extra={"tick": tick})
    try:
        outcome = await with_retry(api.login, RETRY_COUNT + 1, retry_on=(RequestError,))
    except Exception as e:
        log_error(e)
        return None

    if not outcome.ok:
        log_error(outcome.error)
        return None
    return outcome.value
