"""
privaccess_sdk.errors

Exception hierarchy for the SDK.

Responsibilities:
- Separate configuration errors (raised synchronously at composition/registration time)
  from transport and API errors (raised by resource operations).
- Carry enough structured context for callers to report "required vs supplied".
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class PrivAccessError(Exception):
    """Base class for every error raised by the SDK."""


# --- Configuration ----------------------------------------------------------


class ServiceAlreadyRegisteredError(PrivAccessError, ValueError):
    def __init__(self, service_name: str) -> None:
        super().__init__(f"service {service_name} already registered")
        self.service_name = service_name


class ServiceNotRegisteredError(PrivAccessError, LookupError):
    def __init__(self, service_name: str) -> None:
        super().__init__(f"service {service_name} not registered")
        self.service_name = service_name


class MissingAuthenticatorError(PrivAccessError, ValueError):
    """
    Raised when a service is composed without one of its required authenticators.
    """

    def __init__(self, service_name: str, missing: str, supplied: Iterable[str]) -> None:
        self.service_name = service_name
        self.missing = missing
        self.supplied = tuple(supplied)
        supplied_txt = ", ".join(self.supplied) or "<none>"
        super().__init__(
            f"{service_name} requires authenticator '{missing}' (supplied: {supplied_txt})"
        )


class AuthenticatorNotFoundError(PrivAccessError, LookupError):
    def __init__(self, name: str, service_name: str | None = None) -> None:
        self.name = name
        self.service_name = service_name
        prefix = f"{service_name}: " if service_name else ""
        super().__init__(f"{prefix}authenticator {name} not found")


class UnknownPermissionTierError(PrivAccessError, ValueError):
    def __init__(self, tier: str) -> None:
        super().__init__(f"invalid permission set: {tier}")
        self.tier = tier


class TenantResolutionError(PrivAccessError, ValueError):
    pass


class InvalidRequestError(PrivAccessError, ValueError):
    """Caller supplied an inconsistent request model."""


# --- Transport / API --------------------------------------------------------


class TransportError(PrivAccessError):
    """The request never produced an HTTP response (connect, timeout, protocol)."""


class ApiError(PrivAccessError):
    """The platform answered with a status the operation does not accept."""

    def __init__(self, operation: str, status_code: int, body: Any) -> None:
        self.operation = operation
        self.status_code = status_code
        self.body = body
        super().__init__(f"failed to {operation} - [{status_code}] - [{body}]")


class PageStreamError(PrivAccessError):
    """
    Terminal condition of a paginated listing that ended before the last page.

    `page_index` is the zero-based index of the page whose request failed.
    """

    def __init__(self, stream: str, page_index: int, reason: str) -> None:
        self.stream = stream
        self.page_index = page_index
        self.reason = reason
        super().__init__(f"{stream}: listing aborted at page {page_index}: {reason}")


# --- Module Notes -----------------------------------------------------------
# Configuration errors also subclass ValueError/LookupError so callers that already
# catch the builtin families keep working.
