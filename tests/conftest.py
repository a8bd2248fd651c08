"""
tests.conftest

Shared fixtures for SDK tests.

Responsibilities:
- Mint unsigned-but-decodable platform tokens carrying tenant claims.
- Provide a routable fake platform backed by httpx.MockTransport (no network).
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import jwt
import pytest

from privaccess_sdk.auth.authenticators import PlatformTokenAuthenticator
from privaccess_sdk.observability.context import event_hooks
from privaccess_sdk.services.catalog import build_registry
from privaccess_sdk.settings import Settings

TENANT = "acme"


def make_token(**claims: Any) -> str:
    claims.setdefault("subdomain", TENANT)
    claims.setdefault("tenant_id", "tenant-1")
    return jwt.encode(claims, "test-secret", algorithm="HS256")


Handler = Callable[[httpx.Request], httpx.Response]


class FakePlatform:
    """
    Routes `(method, path)` to a handler and records every request in arrival order.
    Unrouted requests answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def route(self, method: str, path: str, handler: Handler | httpx.Response | Any) -> None:
        if isinstance(handler, httpx.Response):
            response = handler
            self.routes[(method, path)] = lambda _r: response
        elif callable(handler):
            self.routes[(method, path)] = handler
        else:
            payload = handler
            self.routes[(method, path)] = lambda _r: httpx.Response(200, json=payload)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "not found"})
        return handler(request)

    def bodies(self) -> list[Any]:
        return [json.loads(r.content) if r.content else None for r in self.requests]


@pytest.fixture
def settings() -> Settings:
    return Settings(env="test", log_json=False, stats_max_concurrency=4)


@pytest.fixture
def platform_auth() -> PlatformTokenAuthenticator:
    return PlatformTokenAuthenticator(token=make_token(), username=f"admin@{TENANT}.cyberark.cloud")


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def fake() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
async def http(fake: FakePlatform):
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(fake), event_hooks=event_hooks()
    ) as client:
        yield client


# --- Module Notes -----------------------------------------------------------
# Service tests compose through `BaseService.create` so tenant URL resolution is
# exercised on every call path.
