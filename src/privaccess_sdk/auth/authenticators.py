"""
privaccess_sdk.auth.authenticators

Named credentials that services are composed with.

Responsibilities:
- Define the minimal `Authenticator` contract (a stable name).
- Provide the ordered `AuthenticatorSet` used to satisfy service requirements.
- Provide the platform bearer-token authenticator (`isp`).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from privaccess_sdk.errors import AuthenticatorNotFoundError
from privaccess_sdk.settings import ROOT_DOMAINS

PLATFORM_AUTHENTICATOR = "isp"


@runtime_checkable
class Authenticator(Protocol):
    @property
    def authenticator_name(self) -> str: ...


@dataclass(frozen=True, slots=True)
class PlatformTokenAuthenticator:
    """
    Holds an already-acquired platform access token.

    `username` is the login identity (`user@tenant.<root-domain>`); `metadata` may carry
    an `env` hint (`prod`, `gov-prod`).
    """

    token: str = field(repr=False)
    username: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def authenticator_name(self) -> str:
        return PLATFORM_AUTHENTICATOR

    def base_tenant_url(self) -> str | None:
        # The tenant host is the domain part of a platform login name.
        if "@" not in self.username:
            return None
        domain_part = self.username.split("@", 1)[1]
        if any(root in domain_part for root in ROOT_DOMAINS.values()):
            return domain_part
        return None

    def deploy_env(self, default: str = "prod") -> str:
        if "@" in self.username:
            for env, root in ROOT_DOMAINS.items():
                if root in self.username.split("@", 1)[1]:
                    return env
        env = self.metadata.get("env")
        if env in ROOT_DOMAINS:
            return env
        return default


class AuthenticatorSet:
    """
    Ordered collection of authenticators. When names repeat, the first one wins.
    """

    def __init__(self, authenticators: Iterable[Authenticator] = ()) -> None:
        self._items: tuple[Authenticator, ...] = tuple(authenticators)

    def get(self, name: str) -> Authenticator:
        for a in self._items:
            if a.authenticator_name == name:
                return a
        raise AuthenticatorNotFoundError(name)

    def has(self, name: str) -> bool:
        return any(a.authenticator_name == name for a in self._items)

    def names(self) -> list[str]:
        return [a.authenticator_name for a in self._items]

    def __iter__(self) -> Iterator[Authenticator]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"AuthenticatorSet({self.names()!r})"


# --- Module Notes -----------------------------------------------------------
# Token acquisition and refresh happen outside the SDK; callers construct
# `PlatformTokenAuthenticator` from whatever login flow they already run.
