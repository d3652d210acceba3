"""Test fixtures for favpoller tests."""

import asyncio
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from favpoller.services.api_client import RequestError

TORONTO = ZoneInfo("America/Toronto")

# Thursday 2025-01-16, noon in Toronto — inside the run window
ELIGIBLE_TIME = datetime(2025, 1, 16, 12, 0, tzinfo=TORONTO)
# Friday 2025-01-17, noon in Toronto — polling not allowed
INELIGIBLE_TIME = datetime(2025, 1, 17, 12, 0, tzinfo=TORONTO)


def request_error(path: str = "/api/item/favorites", status_code: int = 503) -> RequestError:
    return RequestError(
        f"HTTP {status_code}",
        method="POST",
        url=f"http://api.test{path}",
        json={"favorites_only": True},
        status_code=status_code,
    )


class FakeApi:
    """Scripted stand-in for ApiClient.

    Each call takes the next entry of its script; the last entry repeats
    forever. Exception entries are raised instead of returned.
    """

    def __init__(self, logins=None, listings=None):
        self.logins = list(logins if logins is not None else ["token"])
        self.listings = list(listings if listings is not None else [{"items": []}])
        self.login_calls = 0
        self.list_calls = 0

    async def login(self):
        self.login_calls += 1
        return self._next(self.logins)

    async def list_favorite_businesses(self):
        self.list_calls += 1
        return self._next(self.listings)

    @staticmethod
    def _next(script):
        result = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(result, BaseException):
            raise result
        return result


class BlockingApi(FakeApi):
    """Listing calls hang until ``release`` is set."""

    def __init__(self):
        super().__init__()
        self.release = asyncio.Event()
        self.cancelled = 0

    async def list_favorite_businesses(self):
        self.list_calls += 1
        try:
            await self.release.wait()
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        return {"items": ["released"]}


async def one_token(token="token"):
    yield token


async def no_tokens():
    await asyncio.Event().wait()
    yield  # pragma: no cover


async def next_batch(stream, timeout: float = 1.0):
    return await asyncio.wait_for(anext(stream), timeout)


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()
