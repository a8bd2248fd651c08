"""
privaccess_sdk.services.base

Service composition: descriptor + authenticators -> ready-to-use service.

Responsibilities:
- Verify a service's required authenticators are supplied (all-or-nothing).
- Resolve the tenant base URL from the platform token and build the REST boundary.
- Provide the shared base class for resource services.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Self

import httpx

from privaccess_sdk.auth.authenticators import (
    PLATFORM_AUTHENTICATOR,
    Authenticator,
    AuthenticatorSet,
    PlatformTokenAuthenticator,
)
from privaccess_sdk.auth.tenant import resolve_service_url
from privaccess_sdk.clients.json_case import snake_keys
from privaccess_sdk.clients.rest import RestClient, expect
from privaccess_sdk.errors import ApiError, AuthenticatorNotFoundError, MissingAuthenticatorError
from privaccess_sdk.observability.logging import get_logger
from privaccess_sdk.services.registry import ServiceDescriptor, ServiceRegistry
from privaccess_sdk.settings import Settings, get_settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ComposedService:
    descriptor: ServiceDescriptor
    authenticators: AuthenticatorSet

    def authenticator(self, name: str) -> Authenticator:
        try:
            return self.authenticators.get(name)
        except AuthenticatorNotFoundError as e:
            raise AuthenticatorNotFoundError(name, self.descriptor.name) from e

    def has_authenticator(self, name: str) -> bool:
        return self.authenticators.has(name)


def compose_service(
    descriptor: ServiceDescriptor, authenticators: AuthenticatorSet
) -> ComposedService:
    # Sorted so the reported missing name is deterministic.
    for required in sorted(descriptor.required_authenticator_names):
        if not authenticators.has(required):
            raise MissingAuthenticatorError(descriptor.name, required, authenticators.names())
    return ComposedService(descriptor=descriptor, authenticators=authenticators)


class BaseService:
    """
    Subclasses declare:
    - SERVICE_NAME: registry name (`pcloud-safes`, ...)
    - URL_SERVICE / URL_SEPARATOR / BASE_PATH: how the tenant host is built
    """

    SERVICE_NAME: ClassVar[str]
    URL_SERVICE: ClassVar[str]
    URL_SEPARATOR: ClassVar[str] = "-"
    BASE_PATH: ClassVar[str] = ""

    def __init__(self, *, composed: ComposedService, rest: RestClient, settings: Settings) -> None:
        self._composed = composed
        self._rest = rest
        self._settings = settings

    @property
    def composed(self) -> ComposedService:
        return self._composed

    @property
    def rest(self) -> RestClient:
        return self._rest

    def _snake_json(
        self, response: httpx.Response, *statuses: int, operation: str
    ) -> Any:
        expect(response, *statuses, operation=operation)
        try:
            return snake_keys(response.json())
        except ValueError as e:
            raise ApiError(operation, response.status_code, response.text) from e

    @classmethod
    def service_url(cls, platform: PlatformTokenAuthenticator, settings: Settings) -> str:
        url = resolve_service_url(
            cls.URL_SERVICE,
            token=platform.token,
            base_tenant_url=platform.base_tenant_url(),
            separator=cls.URL_SEPARATOR,
            deploy_env=platform.deploy_env(settings.deploy_env),
        )
        return f"{url}/{cls.BASE_PATH}" if cls.BASE_PATH else url

    @classmethod
    def create(
        cls,
        registry: ServiceRegistry,
        authenticators: AuthenticatorSet,
        *,
        http: httpx.AsyncClient,
        settings: Settings | None = None,
        base_url: str | None = None,
    ) -> Self:
        settings = settings or get_settings()
        composed = compose_service(registry.get(cls.SERVICE_NAME), authenticators)
        platform = composed.authenticator(PLATFORM_AUTHENTICATOR)
        if not isinstance(platform, PlatformTokenAuthenticator):
            raise AuthenticatorNotFoundError(PLATFORM_AUTHENTICATOR, cls.SERVICE_NAME)
        url = base_url or cls.service_url(platform, settings)
        rest = RestClient(http=http, base_url=url, token=platform.token, user_agent=settings.user_agent)
        log.info("service_composed", service=cls.SERVICE_NAME, base_url=url)
        return cls(composed=composed, rest=rest, settings=settings)


# --- Module Notes -----------------------------------------------------------
# The registry is injected, never global: tests and applications build their own
# with `services.catalog.build_registry()`.
