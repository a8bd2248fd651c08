"""
privaccess_sdk.services.catalog

Built-in service descriptors.

Responsibilities:
- Declare every service the SDK ships and the authenticators each one needs.
- Build a fresh, fully populated `ServiceRegistry`.
"""

from __future__ import annotations

from privaccess_sdk.auth.authenticators import PLATFORM_AUTHENTICATOR
from privaccess_sdk.services.registry import ServiceDescriptor, ServiceRegistry

_REQUIRED = (PLATFORM_AUTHENTICATOR,)

# Umbrella services, in the order they are presented to callers.
TOP_LEVEL_SERVICES: tuple[ServiceDescriptor, ...] = (
    ServiceDescriptor.of("pcloud", required=_REQUIRED),
    ServiceDescriptor.of("sia", required=_REQUIRED),
)

NESTED_SERVICES: tuple[ServiceDescriptor, ...] = (
    ServiceDescriptor.of("pcloud-accounts", required=_REQUIRED),
    ServiceDescriptor.of("pcloud-safes", required=_REQUIRED),
    ServiceDescriptor.of("pcloud-platforms", required=_REQUIRED),
    ServiceDescriptor.of("sia-certificates", required=_REQUIRED),
    ServiceDescriptor.of("sia-secrets-db", required=_REQUIRED),
    ServiceDescriptor.of("sia-workspaces-db", required=_REQUIRED),
)


def build_registry() -> ServiceRegistry:
    registry = ServiceRegistry()
    for d in TOP_LEVEL_SERVICES:
        registry.register(d, top_level=True)
    for d in NESTED_SERVICES:
        registry.register(d)
    return registry
