"""Authenticators and tenant URL resolution for platform tokens."""

from privaccess_sdk.auth.authenticators import (
    Authenticator,
    AuthenticatorSet,
    PlatformTokenAuthenticator,
)
from privaccess_sdk.auth.tenant import resolve_service_url, tenant_id

__all__ = [
    "Authenticator",
    "AuthenticatorSet",
    "PlatformTokenAuthenticator",
    "resolve_service_url",
    "tenant_id",
]
