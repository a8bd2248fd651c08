"""
tests.test_tenant

Tenant-aware service URL resolution.
"""

from __future__ import annotations

import pytest

from privaccess_sdk.auth.authenticators import PlatformTokenAuthenticator
from privaccess_sdk.auth.tenant import resolve_service_url, tenant_id
from privaccess_sdk.errors import TenantResolutionError
from tests.conftest import make_token


def test_subdomain_claim_wins() -> None:
    url = resolve_service_url(
        "dpa", token=make_token(subdomain="acme"), tenant_subdomain="other"
    )
    assert url == "https://acme-dpa.cyberark.cloud"


def test_vault_separator_and_gov_domain() -> None:
    url = resolve_service_url(
        "privilegecloud", token=make_token(), separator=".", deploy_env="gov-prod"
    )
    assert url == "https://acme.privilegecloud.cyberarkgov.cloud"


def test_platform_domain_claim_strips_shell_prefix() -> None:
    token = make_token(platform_domain="shell.example.cloud")
    assert resolve_service_url("dpa", token=token) == "https://acme-dpa.example.cloud"


def test_falls_back_to_base_url_label() -> None:
    token = make_token(subdomain="")
    url = resolve_service_url("dpa", token=token, base_tenant_url="beta.cyberark.cloud")
    assert url == "https://beta-dpa.cyberark.cloud"


def test_falls_back_to_unique_name() -> None:
    token = make_token(subdomain="", unique_name="ops@gamma.cyberarkgov.cloud")
    assert resolve_service_url("dpa", token=token) == "https://gamma-dpa.cyberarkgov.cloud"


def test_unresolvable_tenant() -> None:
    with pytest.raises(TenantResolutionError):
        resolve_service_url("dpa", token=make_token(subdomain=""))


def test_malformed_token() -> None:
    with pytest.raises(TenantResolutionError, match="failed to parse"):
        resolve_service_url("dpa", token="not-a-jwt")


def test_tenant_id_claim() -> None:
    assert tenant_id(make_token(tenant_id="t-42")) == "t-42"


def test_authenticator_derives_env_and_base_url() -> None:
    auth = PlatformTokenAuthenticator(token="x", username="ops@acme.cyberarkgov.cloud")
    assert auth.base_tenant_url() == "acme.cyberarkgov.cloud"
    assert auth.deploy_env() == "gov-prod"

    plain = PlatformTokenAuthenticator(token="x", username="ops", metadata={"env": "gov-prod"})
    assert plain.base_tenant_url() is None
    assert plain.deploy_env() == "gov-prod"
