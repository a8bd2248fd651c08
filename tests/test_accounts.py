"""
tests.test_accounts

Accounts and platforms services against a fake vault.
"""

from __future__ import annotations

import base64

import httpx
import pytest

from privaccess_sdk.auth.authenticators import AuthenticatorSet
from privaccess_sdk.errors import ApiError, InvalidRequestError
from privaccess_sdk.models.accounts import (
    AccountsFilter,
    AddAccount,
    LinkAccount,
    SetAccountNextCredentials,
    UnlinkAccount,
    UpdateAccount,
)
from privaccess_sdk.models.platforms import DuplicateTargetPlatform, PlatformsFilter, TargetPlatformsFilter
from privaccess_sdk.paging import collect
from privaccess_sdk.services.pcloud import AccountsService, PlatformsService

ACCOUNTS = "/passwordvault/api/accounts"
PLATFORMS = "/passwordvault/api/platforms"


def _account(i: int, platform: str = "WinDomain", safe: str = "Safe 1") -> dict:
    return {
        "id": f"{i}_1",
        "name": f"acct{i}",
        "userName": f"user{i}",
        "platformId": platform,
        "safeName": safe,
        "secretManagement": {"automaticManagementEnabled": True},
    }


@pytest.fixture
def accounts(registry, platform_auth, http, settings) -> AccountsService:
    return AccountsService.create(registry, AuthenticatorSet([platform_auth]), http=http, settings=settings)


@pytest.fixture
def platforms(registry, platform_auth, http, settings) -> PlatformsService:
    return PlatformsService.create(registry, AuthenticatorSet([platform_auth]), http=http, settings=settings)


@pytest.mark.asyncio
async def test_list_accounts_remaps_ids(fake, accounts: AccountsService) -> None:
    fake.route("GET", ACCOUNTS, {"value": [_account(1), _account(2)]})
    items = await collect(accounts.list_accounts())

    assert [a.account_id for a in items] == ["1_1", "2_1"]
    assert items[0].username == "user1"
    assert items[0].secret_management.automatic_management_enabled is True


@pytest.mark.asyncio
async def test_list_accounts_by_query(fake, accounts: AccountsService) -> None:
    fake.route("GET", ACCOUNTS, {"value": []})
    await collect(
        accounts.list_accounts_by(AccountsFilter(search="db", search_type="contains", safe_name="Prod", limit=50))
    )
    assert dict(fake.requests[0].url.params) == {
        "search": "db",
        "searchType": "contains",
        "limit": "50",
        "filter": "safeName eq Prod",
    }


@pytest.mark.asyncio
async def test_credentials_retrieval(fake, accounts: AccountsService) -> None:
    fake.route("POST", f"{ACCOUNTS}/1_1/password/retrieve", httpx.Response(200, json="s3cr3t"))
    creds = await accounts.account_credentials("1_1", reason="audit")

    assert creds.password == "s3cr3t"
    assert "s3cr3t" not in repr(creds)
    assert fake.bodies()[0] == {"Reason": "audit", "ActionType": "show"}


@pytest.mark.asyncio
async def test_add_account_nests_management_fields(fake, accounts: AccountsService) -> None:
    fake.route("POST", ACCOUNTS, httpx.Response(201, json=_account(3)))
    account = await accounts.add_account(
        AddAccount(
            name="acct3",
            safe_name="Safe 1",
            secret="pw",
            platform_id="WinDomain",
            automatic_management_enabled=True,
            remote_machines=["host1"],
        )
    )

    body = fake.bodies()[0]
    assert body["safeName"] == "Safe 1"
    assert body["secret"] == "pw"
    assert body["secretManagement"] == {"automaticManagementEnabled": True}
    assert body["remoteMachinesAccess"] == {"remoteMachines": ["host1"]}
    assert "automaticManagementEnabled" not in body
    assert account.account_id == "3_1"


@pytest.mark.asyncio
async def test_update_account_patch_and_secret(fake, accounts: AccountsService) -> None:
    fake.route("PATCH", f"{ACCOUNTS}/1_1/", _account(1))
    fake.route("POST", f"{ACCOUNTS}/1_1/password/update", httpx.Response(200))

    await accounts.update_account(UpdateAccount(account_id="1_1", address="10.0.0.1", secret="new"))

    patch, rotate = fake.bodies()
    assert patch == [{"op": "replace", "path": "/address", "value": "10.0.0.1"}]
    assert rotate == {"newCredentials": "new"}


@pytest.mark.asyncio
async def test_update_account_without_changes_reads(fake, accounts: AccountsService) -> None:
    fake.route("GET", f"{ACCOUNTS}/1_1/", _account(1))
    account = await accounts.update_account(UpdateAccount(account_id="1_1"))
    assert account.name == "acct1"
    assert [r.method for r in fake.requests] == ["GET"]


@pytest.mark.asyncio
async def test_delete_account_requires_204(fake, accounts: AccountsService) -> None:
    fake.route("DELETE", f"{ACCOUNTS}/1_1/", httpx.Response(200))
    with pytest.raises(ApiError):
        await accounts.delete_account("1_1")


@pytest.mark.asyncio
async def test_accounts_stats(fake, accounts: AccountsService) -> None:
    fake.route(
        "GET",
        ACCOUNTS,
        {"value": [_account(1), _account(2, platform="Unix"), _account(3, safe="Safe 2")]},
    )
    stats = await accounts.accounts_stats()
    assert stats.accounts_count == 3
    assert stats.accounts_count_by_platform_id == {"WinDomain": 2, "Unix": 1}
    assert stats.accounts_count_by_safe_name == {"Safe 1": 2, "Safe 2": 1}


@pytest.mark.asyncio
async def test_secret_versions(fake, accounts: AccountsService) -> None:
    fake.route(
        "GET",
        f"{ACCOUNTS}/1_1/secret/versions",
        {"versions": [{"versionId": 2, "isTemporary": False, "modifiedBy": "admin"}, {"versionId": 1, "isTemporary": True}]},
    )
    versions = await accounts.list_account_secret_versions("1_1")
    assert [(v.version_id, v.is_temporary) for v in versions] == [(2, False), (1, True)]
    assert versions[0].modified_by == "admin"


@pytest.mark.asyncio
async def test_generate_credentials_hides_password(fake, accounts: AccountsService) -> None:
    fake.route("POST", f"{ACCOUNTS}/1_1/secret/generate", {"password": "Gen3rated!"})
    creds = await accounts.generate_account_credentials("1_1")
    assert creds.password == "Gen3rated!"
    assert "Gen3rated!" not in repr(creds)


@pytest.mark.asyncio
async def test_credential_lifecycle_endpoints(fake, accounts: AccountsService) -> None:
    for action in ("verify", "change", "reconcile", "setnextpassword"):
        fake.route("POST", f"{ACCOUNTS}/1_1/{action}", httpx.Response(200))

    await accounts.verify_account_credentials("1_1")
    await accounts.change_account_credentials("1_1")
    await accounts.reconcile_account_credentials("1_1")
    await accounts.set_account_next_credentials(
        SetAccountNextCredentials(account_id="1_1", new_credentials="next", change_immediately=True)
    )

    assert [r.url.path.rsplit("/", 1)[-1] for r in fake.requests] == [
        "verify",
        "change",
        "reconcile",
        "setnextpassword",
    ]
    assert fake.bodies() == [None, None, None, {"newCredentials": "next", "changeImmediately": True}]


@pytest.mark.asyncio
async def test_credential_action_rejection_raises(fake, accounts: AccountsService) -> None:
    fake.route("POST", f"{ACCOUNTS}/1_1/verify", httpx.Response(403, json={"ErrorCode": "PASWS013E"}))
    with pytest.raises(ApiError) as exc:
        await accounts.verify_account_credentials("1_1")
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_link_and_unlink_account(fake, accounts: AccountsService) -> None:
    fake.route("POST", f"{ACCOUNTS}/1_1/linkaccount", httpx.Response(200))
    fake.route("DELETE", f"{ACCOUNTS}/1_1/linkaccount/3/", httpx.Response(200))

    await accounts.link_account(LinkAccount(account_id="1_1", safe="Logon", extra_password_index=3, name="rec"))
    await accounts.unlink_account(UnlinkAccount(account_id="1_1", extra_password_index=3))

    assert fake.bodies()[0] == {"safe": "Logon", "extraPasswordIndex": 3, "name": "rec", "folder": "Root"}
    assert [r.method for r in fake.requests] == ["POST", "DELETE"]


@pytest.mark.asyncio
async def test_platforms_type_lowercased_and_filtered(fake, platforms: PlatformsService) -> None:
    fake.route(
        "GET",
        PLATFORMS,
        {
            "platforms": [
                {"general": {"id": "WinDomain", "platformType": "REGULAR"}},
                {"general": {"id": "PSM", "platformType": "Group"}},
            ],
        },
    )
    listed = await platforms.list_platforms_by(PlatformsFilter(active=True, platform_type="regular"))

    assert [p.general.platform_type for p in listed] == ["regular", "group"]
    assert dict(fake.requests[0].url.params) == {"Active": "true", "PlatformType": "regular"}

    stats = await platforms.platforms_stats()
    assert stats.platforms_count == 2
    assert stats.platforms_count_by_type == {"regular": 1, "group": 1}


@pytest.mark.asyncio
async def test_platforms_missing_envelope(fake, platforms: PlatformsService) -> None:
    fake.route("GET", PLATFORMS, {"value": []})
    with pytest.raises(ApiError, match="list platforms"):
        await platforms.list_platforms()


TARGET_PLATFORMS = f"{PLATFORMS}/targets"


def _target(i: int, platform_id: str, *, active: bool = True, system_type: str = "Windows") -> dict:
    return {"id": i, "platformId": platform_id, "name": f"{platform_id} name", "active": active, "systemType": system_type}


@pytest.mark.asyncio
async def test_target_platforms_filters(fake, platforms: PlatformsService) -> None:
    fake.route(
        "GET",
        TARGET_PLATFORMS,
        {"platforms": [_target(1, "WinDomain"), _target(2, "WinServerLocal"), _target(3, "UnixSSH", system_type="Unix")]},
    )

    listed = await platforms.list_target_platforms_by(
        TargetPlatformsFilter(platform_id="win*", system_type="Windows", active=True, manual_change=True)
    )

    assert [p.id for p in listed] == [1, 2]
    assert dict(fake.requests[0].url.params) == {
        "filter": "active eq true AND systemType eq Windows AND manualChange eq true"
    }


@pytest.mark.asyncio
async def test_target_platform_lookup_and_stats(fake, platforms: PlatformsService) -> None:
    fake.route(
        "GET",
        TARGET_PLATFORMS,
        {"platforms": [_target(1, "WinDomain"), _target(2, "UnixSSH", active=False, system_type="Unix")]},
    )

    assert (await platforms.target_platform(2)).platform_id == "UnixSSH"
    with pytest.raises(InvalidRequestError):
        await platforms.target_platform(99)

    stats = await platforms.target_platforms_stats()
    assert stats.target_platforms_count == 2
    assert stats.active_target_platforms_count == 1
    assert stats.target_platforms_count_by_system_type == {"Windows": 1, "Unix": 1}


@pytest.mark.asyncio
async def test_target_platform_lifecycle(fake, platforms: PlatformsService) -> None:
    fake.route("POST", f"{TARGET_PLATFORMS}/4/activate", httpx.Response(200))
    fake.route("POST", f"{TARGET_PLATFORMS}/4/deactivate", httpx.Response(200))
    fake.route("POST", f"{TARGET_PLATFORMS}/4", {"id": 9, "platformId": "WinCopy", "name": "copy"})
    fake.route("DELETE", f"{TARGET_PLATFORMS}/9", httpx.Response(204))

    await platforms.activate_target_platform(4)
    await platforms.deactivate_target_platform(4)
    info = await platforms.duplicate_target_platform(DuplicateTargetPlatform(target_platform_id=4, name="copy"))
    await platforms.delete_target_platform(info.id)

    assert info.platform_id == "WinCopy"
    assert fake.bodies()[2] == {"name": "copy"}
    assert [(r.method, r.url.path) for r in fake.requests][-1] == ("DELETE", f"{TARGET_PLATFORMS}/9")


@pytest.mark.asyncio
async def test_import_platform_sends_base64_package(fake, platforms: PlatformsService, tmp_path) -> None:
    package = tmp_path / "WinCustom.zip"
    package.write_bytes(b"PK\x03\x04zip")
    fake.route("POST", f"{PLATFORMS}/import", httpx.Response(201, json={"platformId": "WinCustom"}))
    fake.route("GET", f"{PLATFORMS}/WinCustom", {"platformId": "WinCustom", "name": "Win custom"})

    details = await platforms.import_platform(str(package))

    assert fake.bodies()[0] == {"ImportFile": base64.b64encode(b"PK\x03\x04zip").decode()}
    assert details.platform_id == "WinCustom"


@pytest.mark.asyncio
async def test_import_platform_missing_file(fake, platforms: PlatformsService, tmp_path) -> None:
    with pytest.raises(InvalidRequestError):
        await platforms.import_platform(str(tmp_path / "absent.zip"))
    assert fake.requests == []


@pytest.mark.asyncio
async def test_export_target_platform_writes_zip(fake, platforms: PlatformsService, tmp_path) -> None:
    fake.route("GET", TARGET_PLATFORMS, {"platforms": [_target(5, "WinDomain")]})
    fake.route("POST", f"{TARGET_PLATFORMS}/5/export", httpx.Response(200, content=b"zip-bytes"))

    out = await platforms.export_target_platform(5, str(tmp_path / "exports"))

    assert out == tmp_path / "exports" / "WinDomain.zip"
    assert out.read_bytes() == b"zip-bytes"


# --- Module Notes -----------------------------------------------------------
# Account and platform listings share the vault host; both fixtures resolve it
# from the same token.
