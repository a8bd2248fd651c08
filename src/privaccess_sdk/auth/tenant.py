"""
privaccess_sdk.auth.tenant

Tenant-aware service URL resolution from platform access tokens.

Responsibilities:
- Read tenant claims from a platform JWT (without signature verification).
- Build `https://<tenant><sep><service>.<root-domain>` service base URLs.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

import jwt
from jwt import InvalidTokenError

from privaccess_sdk.errors import TenantResolutionError
from privaccess_sdk.settings import ROOT_DOMAINS


def _claims(token: str) -> dict[str, Any]:
    try:
        # The platform validates the signature; the SDK only reads routing claims.
        return jwt.decode(token, options={"verify_signature": False})
    except InvalidTokenError as e:
        raise TenantResolutionError(f"failed to parse platform token: {e}") from e


def resolve_service_url(
    service_name: str,
    *,
    token: str | None,
    tenant_subdomain: str | None = None,
    base_tenant_url: str | None = None,
    separator: str = "-",
    deploy_env: str = "prod",
) -> str:
    """
    Resolution order for the tenant label:
    - `subdomain` claim
    - explicit `tenant_subdomain`
    - first host label of `base_tenant_url`
    - domain part of the `unique_name` claim when it contains a known root domain
    """
    domain = ROOT_DOMAINS.get(deploy_env, ROOT_DOMAINS["prod"])
    tenant: str | None = None
    claims = _claims(token) if token else {}

    if isinstance(claims.get("subdomain"), str) and claims["subdomain"]:
        tenant = claims["subdomain"]
    if isinstance(claims.get("platform_domain"), str) and claims["platform_domain"]:
        domain = claims["platform_domain"]
        if domain.startswith("shell.") and service_name:
            domain = domain.removeprefix("shell.")

    if not tenant and tenant_subdomain:
        tenant = tenant_subdomain

    if not tenant and base_tenant_url:
        if not base_tenant_url.startswith("https://"):
            base_tenant_url = "https://" + base_tenant_url
        host = urlparse(base_tenant_url).hostname or ""
        tenant = host.split(".")[0] or None

    if not tenant:
        unique_name = claims.get("unique_name")
        if isinstance(unique_name, str) and "@" in unique_name:
            domain_part = unique_name.split("@", 1)[1]
            for root in ROOT_DOMAINS.values():
                if root in domain_part:
                    tenant = domain_part.split(".")[0]
                    domain = root
                    break

    if not tenant:
        raise TenantResolutionError("failed to resolve tenant subdomain")

    if service_name:
        return f"https://{tenant}{separator}{service_name}.{domain}"
    return f"https://{tenant}.{domain}"


def tenant_id(token: str) -> str:
    value = _claims(token).get("tenant_id")
    if not isinstance(value, str) or not value:
        raise TenantResolutionError("token carries no tenant_id claim")
    return value


# --- Module Notes -----------------------------------------------------------
# Services call `resolve_service_url` once, at composition time, with their own
# service name, separator and the authenticator's username-derived base URL.
