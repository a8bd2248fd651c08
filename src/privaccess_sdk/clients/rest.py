"""
privaccess_sdk.clients.rest

Authenticated REST boundary for one platform service.

Responsibilities:
- Resolve request paths against the service base URL.
- Attach the platform bearer token.
- Translate transport failures and unexpected statuses into SDK errors.
"""

from __future__ import annotations

from typing import Any

import httpx

from privaccess_sdk.errors import ApiError, TransportError


class RestClient:
    """
    One instance per composed service; the underlying `httpx.AsyncClient` is shared
    and owned by the caller (or by `PrivAccessClient`).
    """

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        base_url: str,
        token: str,
        user_agent: str | None = None,
    ) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._user_agent = user_agent

    @property
    def base_url(self) -> str:
        return self._base_url

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self._token}"}
        if self._user_agent:
            headers["User-Agent"] = self._user_agent
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        content: str | bytes | None = None,
    ) -> httpx.Response:
        try:
            return await self._http.request(
                method,
                self.url(path),
                params=params,
                json=json,
                content=content,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path}: {e}") from e

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> httpx.Response:
        return await self.request("GET", path, params=params)

    async def post(
        self, path: str, *, params: dict[str, Any] | None = None, json: Any = None
    ) -> httpx.Response:
        return await self.request("POST", path, params=params, json=json)

    async def put(
        self, path: str, *, params: dict[str, Any] | None = None, json: Any = None
    ) -> httpx.Response:
        return await self.request("PUT", path, params=params, json=json)

    async def patch(
        self, path: str, *, params: dict[str, Any] | None = None, json: Any = None
    ) -> httpx.Response:
        return await self.request("PATCH", path, params=params, json=json)

    async def delete(
        self, path: str, *, params: dict[str, Any] | None = None, json: Any = None
    ) -> httpx.Response:
        return await self.request("DELETE", path, params=params, json=json)


def expect(response: httpx.Response, *statuses: int, operation: str) -> httpx.Response:
    if response.status_code not in statuses:
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text
        raise ApiError(operation, response.status_code, body)
    return response


# --- Module Notes -----------------------------------------------------------
# No retries: a failed call surfaces immediately as TransportError/ApiError.
