"""Top-level entry point: authentication refresher feeding the favorites poller."""

import logging
from collections.abc import AsyncIterator, Callable
from datetime import datetime

from favpoller.config import (
    MINIMAL_AUTHENTICATION_INTERVAL_MS,
    MINIMAL_POLLING_INTERVAL_MS,
    Settings,
)
from favpoller.config import settings as default_settings
from favpoller.core.scheduling import get_delay, resolve_interval
from favpoller.core.signals import Signal
from favpoller.services.api_client import FavoritesApi
from favpoller.workers.authentication import authentication_stream
from favpoller.workers.favorites import favorites_stream

logger = logging.getLogger(__name__)


def poll_favorite_businesses(
    enabled: Signal[bool],
    api: FavoritesApi,
    settings: Settings | None = None,
    *,
    clock: Callable[[], datetime | None] = lambda: None,
    delay_ms: Callable[[], float] = get_delay,
) -> AsyncIterator[list]:
    """Return the infinite stream of favorite-item batches.

    Intervals are read from ``settings`` once, here, and floored at their
    minimums. ``clock`` and ``delay_ms`` are handed to the poller unchanged.
    """
    settings = settings or default_settings

    authentication_interval_ms = resolve_interval(
        settings.get("api.authentication_interval_ms"),
        MINIMAL_AUTHENTICATION_INTERVAL_MS,
    )
    polling_interval_ms = resolve_interval(
        settings.get("api.polling_interval_ms"),
        MINIMAL_POLLING_INTERVAL_MS,
    )
    logger.info(
        f"Authenticating every {authentication_interval_ms / 1000:.0f}s, "
        f"polling every {polling_interval_ms / 1000:.0f}s"
    )

    authentications = authentication_stream(api, authentication_interval_ms)
    return favorites_stream(
        api,
        enabled,
        authentications,
        polling_interval_ms,
        clock=clock,
        delay_ms=delay_ms,
        prevent_overlap=settings.api.prevent_overlapping_polls,
    )
