"""
privaccess_sdk.services.registry

Catalog of service descriptors.

Responsibilities:
- Hold one descriptor per service name (duplicates rejected, first wins).
- Track top-level services in registration order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from privaccess_sdk.errors import ServiceAlreadyRegisteredError, ServiceNotRegisteredError


@dataclass(frozen=True, slots=True)
class ServiceDescriptor:
    name: str
    required_authenticator_names: frozenset[str] = field(default_factory=frozenset)
    optional_authenticator_names: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(
        cls,
        name: str,
        *,
        required: Iterable[str] = (),
        optional: Iterable[str] = (),
    ) -> ServiceDescriptor:
        return cls(
            name=name,
            required_authenticator_names=frozenset(required),
            optional_authenticator_names=frozenset(optional),
        )


class ServiceRegistry:
    """
    Populated once during start-up by a single writer, then read freely.
    """

    def __init__(self) -> None:
        self._descriptors: dict[str, ServiceDescriptor] = {}
        self._top_level: list[str] = []

    def register(self, descriptor: ServiceDescriptor, *, top_level: bool = False) -> None:
        if descriptor.name in self._descriptors:
            raise ServiceAlreadyRegisteredError(descriptor.name)
        self._descriptors[descriptor.name] = descriptor
        if top_level:
            self._top_level.append(descriptor.name)

    def get(self, name: str) -> ServiceDescriptor:
        try:
            return self._descriptors[name]
        except KeyError as e:
            raise ServiceNotRegisteredError(name) from e

    def all_descriptors(self) -> list[ServiceDescriptor]:
        return list(self._descriptors.values())

    def top_level_descriptors(self) -> list[ServiceDescriptor]:
        return [self._descriptors[n] for n in self._top_level]

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)
