"""Logging for failures that are recovered locally and never re-raised."""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def log_error(error: Any) -> None:
    """Log ``error`` and recover with an empty result.

    Errors that describe a request (``method``, ``url`` and ``json`` attributes,
    as on :class:`favpoller.services.api_client.RequestError`) are logged as a
    multi-line request summary; other exceptions with a traceback are logged
    with it; anything else is logged as its raw value.
    """
    method = getattr(error, "method", None)
    url = getattr(error, "url", None)
    is_exception = isinstance(error, BaseException)
    exc_info = error if is_exception and error.__traceback__ is not None else None

    if method and url:
        body = json.dumps(getattr(error, "json", None), indent=4, default=str)
        logger.error(
            f"Error during request:\n{method} {url}\n{body}\n\n{error}",
            exc_info=exc_info,
            extra={"method": method, "url": str(url)},
        )
    elif exc_info is not None:
        logger.error(f"{type(error).__name__}: {error}", exc_info=exc_info)
    else:
        logger.error(repr(error) if is_exception else str(error))
    return None
