"""HTTP client for the favorites API.

The client keeps the bearer token from the last successful login and sends it
with every later request, so the poller never has to thread the token through
its own calls.
"""

import logging
from typing import Any, Protocol

import httpx

from favpoller.config import HTTP_TIMEOUT

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/auth/login"
FAVORITES_PATH = "/api/item/favorites"

# Request body keys whose values never reach the logs
MASKED_FIELDS = ("password",)


class RequestError(Exception):
    """An API request failed (transport error, HTTP error status or bad body).

    Carries the request shape so :func:`favpoller.core.errors.log_error` can
    report what was sent.
    """

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        json: Any = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.method = method
        self.url = url
        self.json = _mask(json)
        self.status_code = status_code


def _mask(body: Any) -> Any:
    if isinstance(body, dict):
        return {k: ("***" if k in MASKED_FIELDS else v) for k, v in body.items()}
    return body


class FavoritesApi(Protocol):
    """What the refresher and poller need from an API client."""

    async def login(self) -> Any: ...

    async def list_favorite_businesses(self) -> Any: ...


class ApiClient:
    """Async client for login and the favorite-businesses listing."""

    def __init__(
        self,
        base_url: str,
        email: str = "",
        password: str = "",
        timeout: float = HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.email = email
        self.password = password
        self._access_token: str | None = None
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    @property
    def access_token(self) -> str | None:
        return self._access_token

    async def login(self) -> str | None:
        """Authenticate and return the access token (None if the API sent none)."""
        data = await self._request(
            "POST",
            LOGIN_PATH,
            json={"email": self.email, "password": self.password},
            authenticated=False,
        )
        token = data.get("access_token") if isinstance(data, dict) else None
        if token:
            self._access_token = token
            logger.info("Logged in to favorites API")
        return token

    async def list_favorite_businesses(self) -> Any:
        """Fetch the favorites listing; the response carries an ``items`` field."""
        return await self._request("POST", FAVORITES_PATH, json={"favorites_only": True})

    async def _request(
        self,
        method: str,
        path: str,
        json: Any = None,
        authenticated: bool = True,
    ) -> Any:
        url = str(self._client.base_url.join(path))
        headers = {}
        if authenticated and self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"

        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise RequestError(
                f"{type(e).__name__}: {e}", method=method, url=url, json=json
            ) from e

        if response.status_code >= 400:
            raise RequestError(
                f"HTTP {response.status_code} — {response.text[:300]}",
                method=method,
                url=url,
                json=json,
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RequestError(
                f"Invalid JSON response: {e}",
                method=method,
                url=url,
                json=json,
                status_code=response.status_code,
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
