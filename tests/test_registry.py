"""
tests.test_registry

Service registry and composition behavior.

Responsibilities:
- Registering a duplicate name fails and leaves the first descriptor intact.
- Composition is all-or-nothing with respect to required authenticators.
"""

from __future__ import annotations

import pytest

from privaccess_sdk.auth.authenticators import AuthenticatorSet, PlatformTokenAuthenticator
from privaccess_sdk.errors import (
    AuthenticatorNotFoundError,
    MissingAuthenticatorError,
    ServiceAlreadyRegisteredError,
    ServiceNotRegisteredError,
)
from privaccess_sdk.services.base import compose_service
from privaccess_sdk.services.catalog import build_registry
from privaccess_sdk.services.registry import ServiceDescriptor, ServiceRegistry
from tests.conftest import make_token


class _NamedAuth:
    def __init__(self, name: str) -> None:
        self.authenticator_name = name


def test_duplicate_registration_keeps_first() -> None:
    registry = ServiceRegistry()
    first = ServiceDescriptor.of("svc", required=["isp"])
    registry.register(first, top_level=True)

    with pytest.raises(ServiceAlreadyRegisteredError, match="service svc already registered"):
        registry.register(ServiceDescriptor.of("svc", required=["other"]))

    assert registry.get("svc") is first
    assert len(registry) == 1
    assert registry.top_level_descriptors() == [first]


def test_unknown_service_lookup() -> None:
    with pytest.raises(ServiceNotRegisteredError):
        ServiceRegistry().get("missing")


def test_builtin_catalog_order() -> None:
    registry = build_registry()
    assert [d.name for d in registry.top_level_descriptors()] == ["pcloud", "sia"]
    assert "pcloud-safes" in registry
    assert "sia-workspaces-db" in registry


def test_compose_requires_every_authenticator() -> None:
    descriptor = ServiceDescriptor.of("svc", required=["a", "b"], optional=["c"])

    with pytest.raises(MissingAuthenticatorError) as exc:
        compose_service(descriptor, AuthenticatorSet([_NamedAuth("a"), _NamedAuth("c")]))
    assert exc.value.service_name == "svc"
    assert exc.value.missing == "b"
    assert exc.value.supplied == ("a", "c")

    composed = compose_service(descriptor, AuthenticatorSet([_NamedAuth("b"), _NamedAuth("a")]))
    assert composed.has_authenticator("a")
    assert not composed.has_authenticator("c")


def test_compose_keeps_extra_authenticators_reachable() -> None:
    descriptor = ServiceDescriptor.of("svc", required=["a", "b"])
    c = _NamedAuth("c")

    composed = compose_service(descriptor, AuthenticatorSet([_NamedAuth("a"), _NamedAuth("b"), c]))

    assert composed.authenticator("c") is c
    assert composed.authenticators.names() == ["a", "b", "c"]


def test_compose_with_no_requirements_succeeds_empty() -> None:
    composed = compose_service(ServiceDescriptor.of("svc"), AuthenticatorSet())
    assert len(composed.authenticators) == 0


def test_authenticator_lookup_names_service() -> None:
    composed = compose_service(
        ServiceDescriptor.of("svc"),
        AuthenticatorSet([PlatformTokenAuthenticator(token=make_token())]),
    )
    assert composed.authenticator("isp").authenticator_name == "isp"
    with pytest.raises(AuthenticatorNotFoundError) as exc:
        composed.authenticator("other")
    assert exc.value.service_name == "svc"


def test_first_authenticator_wins() -> None:
    first = PlatformTokenAuthenticator(token=make_token(subdomain="one"))
    second = PlatformTokenAuthenticator(token=make_token(subdomain="two"))
    assert AuthenticatorSet([first, second]).get("isp") is first


# --- Module Notes -----------------------------------------------------------
# The composer never partially builds a service: either every required name is
# present or MissingAuthenticatorError is raised before any RestClient exists.
