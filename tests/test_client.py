"""
tests.test_client

SDK entry point: lazy service composition and HTTP client lifecycle.
"""

from __future__ import annotations

import httpx
import pytest

from privaccess_sdk.auth.authenticators import PlatformTokenAuthenticator
from privaccess_sdk.client import PrivAccessClient
from privaccess_sdk.errors import MissingAuthenticatorError
from privaccess_sdk.observability.context import request_context
from privaccess_sdk.paging import collect
from tests.conftest import make_token


@pytest.mark.asyncio
async def test_services_composed_once_and_share_http(fake, http, platform_auth, settings) -> None:
    fake.route("GET", "/passwordvault/api/safes", {"value": []})
    client = PrivAccessClient([platform_auth], settings=settings, http=http)

    assert client.safes is client.safes
    assert client.accounts.rest.base_url == client.safes.rest.base_url
    assert client.db_workspaces.rest.base_url == "https://acme-dpa.cyberark.cloud"
    assert await collect(client.safes.list_safes()) == []

    # Every outbound request carries a correlation id.
    assert fake.requests[0].headers.get("x-request-id")

    await client.aclose()
    assert not http.is_closed


@pytest.mark.asyncio
async def test_bound_request_id_is_forwarded(fake, http, platform_auth, settings) -> None:
    fake.route("GET", "/passwordvault/api/safes", {"value": []})
    client = PrivAccessClient([platform_auth], settings=settings, http=http)

    with request_context(request_id="req-123", caller="audit-job"):
        await collect(client.safes.list_safes())
    await collect(client.safes.list_safes())

    assert fake.requests[0].headers["x-request-id"] == "req-123"
    # Outside the block a fresh id is generated per request.
    assert fake.requests[1].headers["x-request-id"] not in ("", "req-123")


@pytest.mark.asyncio
async def test_base_url_override(fake, http, platform_auth, settings) -> None:
    client = PrivAccessClient(
        [platform_auth],
        settings=settings,
        http=http,
        base_urls={"sia-certificates": "https://proxy.internal/sia"},
    )
    assert client.certificates.rest.url("api/certificates") == "https://proxy.internal/sia/api/certificates"


@pytest.mark.asyncio
async def test_missing_authenticator_on_access(settings) -> None:
    async with PrivAccessClient([], settings=settings) as client:
        with pytest.raises(MissingAuthenticatorError) as exc:
            _ = client.safes
    assert exc.value.missing == "isp"


@pytest.mark.asyncio
async def test_owned_http_client_closed() -> None:
    auth = PlatformTokenAuthenticator(token=make_token())
    client = PrivAccessClient([auth])
    http = client._http
    async with client:
        assert isinstance(http, httpx.AsyncClient)
    assert http.is_closed


# --- Module Notes -----------------------------------------------------------
# Injected clients are never closed by the SDK; the fixture owns their lifecycle.
