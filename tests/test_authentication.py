"""Tests for the authentication refresher."""

import asyncio
import logging

import pytest

from favpoller.workers.authentication import authentication_stream
from tests.conftest import FakeApi, request_error


async def _next_token(stream, timeout: float = 1.0):
    return await asyncio.wait_for(anext(stream), timeout)


@pytest.mark.asyncio
async def test_first_login_is_immediate():
    api = FakeApi(logins=["tok"])
    stream = authentication_stream(api, 60_000)
    assert await _next_token(stream, 0.2) == "tok"
    assert api.login_calls == 1
    await stream.aclose()


@pytest.mark.asyncio
async def test_retries_are_transparent():
    api = FakeApi(logins=[request_error(), request_error(), "tok"])
    stream = authentication_stream(api, 60_000)
    assert await _next_token(stream) == "tok"
    assert api.login_calls == 3
    await stream.aclose()


@pytest.mark.asyncio
async def test_failed_tick_emits_nothing_and_stream_stays_live(caplog):
    api = FakeApi(logins=[request_error(), request_error(), request_error(), "tok-2"])
    stream = authentication_stream(api, 50)
    with caplog.at_level(logging.ERROR, logger="favpoller.core.errors"):
        assert await _next_token(stream) == "tok-2"

    assert api.login_calls == 4
    assert len(caplog.records) == 1
    assert "Error during request" in caplog.records[0].getMessage()
    await stream.aclose()


@pytest.mark.asyncio
async def test_refreshes_every_interval():
    api = FakeApi(logins=["tok-1", "tok-2", "tok-3"])
    stream = authentication_stream(api, 30)
    tokens = [await _next_token(stream) for _ in range(3)]
    assert tokens == ["tok-1", "tok-2", "tok-3"]
    await stream.aclose()


@pytest.mark.asyncio
async def test_empty_tokens_are_dropped(caplog):
    api = FakeApi(logins=[None, "", "tok"])
    stream = authentication_stream(api, 30)
    with caplog.at_level(logging.ERROR):
        assert await _next_token(stream) == "tok"
    assert api.login_calls == 3
    assert not caplog.records
    await stream.aclose()


@pytest.mark.asyncio
async def test_unexpected_errors_are_logged_not_retried(caplog):
    api = FakeApi(logins=[KeyError("access_token"), "tok"])
    stream = authentication_stream(api, 30)
    with caplog.at_level(logging.ERROR, logger="favpoller.core.errors"):
        assert await _next_token(stream) == "tok"
    assert api.login_calls == 2
    assert "KeyError" in caplog.records[0].getMessage()
    await stream.aclose()
