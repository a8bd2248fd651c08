"""
privaccess_sdk.client

Top-level SDK entry point.

Responsibilities:
- Own (or borrow) the shared httpx.AsyncClient and its lifecycle.
- Hold the settings, the service registry and the supplied authenticators.
- Compose resource services lazily, once per client.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

import httpx

from privaccess_sdk.auth.authenticators import Authenticator, AuthenticatorSet
from privaccess_sdk.observability.context import event_hooks
from privaccess_sdk.observability.logging import get_logger
from privaccess_sdk.services.base import BaseService
from privaccess_sdk.services.catalog import build_registry
from privaccess_sdk.services.pcloud import AccountsService, PlatformsService, SafesService
from privaccess_sdk.services.registry import ServiceRegistry
from privaccess_sdk.services.sia import CertificatesService, DBSecretsService, DBWorkspaceService
from privaccess_sdk.settings import Settings, get_settings

log = get_logger(__name__)

S = TypeVar("S", bound=BaseService)


class PrivAccessClient:
    """
    Usage:

        async with PrivAccessClient([PlatformTokenAuthenticator(token=...)]) as client:
            async with client.safes.list_safes() as pages:
                async for page in pages:
                    ...

    An injected `http` client is never closed by `aclose()`.
    """

    def __init__(
        self,
        authenticators: Iterable[Authenticator],
        *,
        settings: Settings | None = None,
        registry: ServiceRegistry | None = None,
        http: httpx.AsyncClient | None = None,
        base_urls: dict[str, str] | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._registry = registry or build_registry()
        self._authenticators = AuthenticatorSet(authenticators)
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            timeout=self._settings.http_timeout_seconds,
            verify=self._settings.verify_tls,
            event_hooks=event_hooks(),
        )
        # Per-service base URL overrides (service name -> URL), mainly for tests and proxies.
        self._base_urls = dict(base_urls or {})
        self._services: dict[str, BaseService] = {}

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def registry(self) -> ServiceRegistry:
        return self._registry

    @property
    def authenticators(self) -> AuthenticatorSet:
        return self._authenticators

    def service(self, cls: type[S]) -> S:
        existing = self._services.get(cls.SERVICE_NAME)
        if existing is None:
            existing = cls.create(
                self._registry,
                self._authenticators,
                http=self._http,
                settings=self._settings,
                base_url=self._base_urls.get(cls.SERVICE_NAME),
            )
            self._services[cls.SERVICE_NAME] = existing
        return existing  # type: ignore[return-value]

    @property
    def accounts(self) -> AccountsService:
        return self.service(AccountsService)

    @property
    def safes(self) -> SafesService:
        return self.service(SafesService)

    @property
    def platforms(self) -> PlatformsService:
        return self.service(PlatformsService)

    @property
    def certificates(self) -> CertificatesService:
        return self.service(CertificatesService)

    @property
    def db_secrets(self) -> DBSecretsService:
        return self.service(DBSecretsService)

    @property
    def db_workspaces(self) -> DBWorkspaceService:
        return self.service(DBWorkspaceService)

    async def aclose(self) -> None:
        self._services.clear()
        if self._owns_http:
            await self._http.aclose()
            log.info("client_closed")

    async def __aenter__(self) -> PrivAccessClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()


# --- Module Notes -----------------------------------------------------------
# Services are composed on first attribute access, so a client holding only some
# authenticators can still use the services whose requirements it satisfies.
