"""Tests for the retry wrapper."""

import logging

import pytest

from favpoller.core.retry import with_retry
from favpoller.services.api_client import RequestError
from tests.conftest import FakeApi, request_error


@pytest.mark.asyncio
async def test_first_success_needs_one_attempt():
    api = FakeApi(logins=["token"])
    outcome = await with_retry(api.login, 3)
    assert outcome.ok
    assert outcome.value == "token"
    assert outcome.attempts == 1
    assert api.login_calls == 1


@pytest.mark.asyncio
async def test_retries_until_success():
    api = FakeApi(logins=[request_error(), request_error(), "token"])
    outcome = await with_retry(api.login, 3, retry_on=(RequestError,))
    assert outcome.ok
    assert outcome.value == "token"
    assert outcome.attempts == 3
    assert api.login_calls == 3


@pytest.mark.asyncio
async def test_returns_last_error_when_attempts_run_out():
    last = request_error(status_code=500)
    api = FakeApi(logins=[request_error(), request_error(), last, "too late"])
    outcome = await with_retry(api.login, 3, retry_on=(RequestError,))
    assert not outcome.ok
    assert outcome.error is last
    assert outcome.value is None
    assert api.login_calls == 3


@pytest.mark.asyncio
async def test_unlisted_errors_propagate():
    api = FakeApi(logins=[KeyError("boom"), "token"])
    with pytest.raises(KeyError):
        await with_retry(api.login, 3, retry_on=(RequestError,))
    assert api.login_calls == 1


@pytest.mark.asyncio
async def test_attempts_must_be_positive():
    with pytest.raises(ValueError):
        await with_retry(FakeApi().login, 0)


@pytest.mark.asyncio
async def test_each_retry_is_logged_at_debug(caplog):
    api = FakeApi(logins=[request_error(), request_error(), "token"])
    with caplog.at_level(logging.DEBUG, logger="favpoller.core.retry"):
        outcome = await with_retry(api.login, 3, retry_on=(RequestError,))

    assert outcome.ok
    retries = [r for r in caplog.records if r.name == "favpoller.core.retry"]
    assert len(retries) == 2
    assert all("Retrying" in r.getMessage() for r in retries)


@pytest.mark.asyncio
async def test_single_attempt_returns_error_without_retrying():
    api = FakeApi(logins=[request_error(), "token"])
    outcome = await with_retry(api.login, 1, retry_on=(RequestError,))
    assert isinstance(outcome.error, RequestError)
    assert outcome.attempts == 1
    assert api.login_calls == 1
