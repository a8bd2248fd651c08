"""
privaccess_sdk.services.pcloud.accounts

Vault accounts service.

Responsibilities:
- List accounts as a lazy page stream (with optional server-side filters).
- Read, create, update and delete accounts; retrieve and rotate their secrets.
- Drive the credential lifecycle (generate, verify, change, set next, reconcile).
- Link and unlink the logon, enable and reconcile accounts of an account.
- Compute simple inventory statistics.
"""

from __future__ import annotations

import json
from collections import Counter
from typing import Any

from pydantic.alias_generators import to_pascal

from privaccess_sdk.clients.rest import expect
from privaccess_sdk.models.accounts import (
    Account,
    AccountCredentials,
    AccountSecretVersion,
    AccountsFilter,
    AccountsStats,
    AddAccount,
    GetAccountCredentials,
    LinkAccount,
    SetAccountNextCredentials,
    UnlinkAccount,
    UpdateAccount,
)
from privaccess_sdk.observability.logging import get_logger
from privaccess_sdk.paging import PageStream, collect, remap_keys, stream_pages
from privaccess_sdk.services.pcloud.base import VaultService

log = get_logger(__name__)

ACCOUNTS_PATH = "api/accounts"

# The platform reports `id`/`userName`; the SDK exposes `account_id`/`username`.
_ACCOUNT_REMAP = remap_keys({"id": "account_id", "user_name": "username"})


def _account(data: dict[str, Any]) -> Account:
    return Account.model_validate(_ACCOUNT_REMAP(data))


class AccountsService(VaultService):
    SERVICE_NAME = "pcloud-accounts"

    def _list(self, query: dict[str, Any]) -> PageStream[Account]:
        return stream_pages(
            self._rest,
            ACCOUNTS_PATH,
            query=query,
            items_keys=("value",),
            remap=_ACCOUNT_REMAP,
            decode_item=Account.model_validate,
            name="list_accounts",
        )

    def list_accounts(self) -> PageStream[Account]:
        log.info("list_accounts")
        return self._list({})

    def list_accounts_by(self, accounts_filter: AccountsFilter) -> PageStream[Account]:
        log.info("list_accounts_by", filter=accounts_filter.model_dump(exclude_none=True))
        query: dict[str, Any] = {}
        if accounts_filter.search:
            query["search"] = accounts_filter.search
        if accounts_filter.search_type:
            query["searchType"] = accounts_filter.search_type
        if accounts_filter.sort:
            query["sort"] = accounts_filter.sort
        if accounts_filter.offset:
            query["offset"] = str(accounts_filter.offset)
        if accounts_filter.limit:
            query["limit"] = str(accounts_filter.limit)
        if accounts_filter.safe_name:
            query["filter"] = f"safeName eq {accounts_filter.safe_name}"
        return self._list(query)

    async def account(self, account_id: str) -> Account:
        log.info("get_account", account_id=account_id)
        r = await self._rest.get(f"{ACCOUNTS_PATH}/{account_id}/")
        return _account(self._snake_json(r, 200, operation="retrieve account"))

    async def account_credentials(
        self, request: GetAccountCredentials | str, *, reason: str | None = None
    ) -> AccountCredentials:
        if isinstance(request, str):
            request = GetAccountCredentials(account_id=request, reason=reason)
        log.info("get_account_credentials", account_id=request.account_id)
        # This endpoint expects PascalCase keys (Reason, TicketId, ActionType, ...).
        body = {
            to_pascal(k): v
            for k, v in request.model_dump(exclude_none=True, exclude={"account_id"}).items()
        }
        r = await self._rest.post(
            f"{ACCOUNTS_PATH}/{request.account_id}/password/retrieve", json=body
        )
        expect(r, 200, operation="retrieve account credentials")
        # The secret is returned as a bare JSON string.
        try:
            secret = r.json()
        except json.JSONDecodeError:
            secret = r.text.strip('"')
        return AccountCredentials(account_id=request.account_id, password=str(secret))

    async def add_account(self, add_account: AddAccount) -> Account:
        log.info("add_account", name=add_account.name, safe_name=add_account.safe_name)
        r = await self._rest.post(ACCOUNTS_PATH, json=add_account.nested_body(exclude=set()))
        return _account(self._snake_json(r, 201, operation="add account"))

    async def update_account(self, update_account: UpdateAccount) -> Account:
        log.info("update_account", account_id=update_account.account_id)
        body = update_account.nested_body(exclude={"account_id", "secret"})
        # PATCH takes JSON-Patch `replace` operations, one per top-level field.
        operations = [{"op": "replace", "path": f"/{k}", "value": v} for k, v in body.items()]
        if not operations:
            account = await self.account(update_account.account_id)
        else:
            r = await self._rest.patch(f"{ACCOUNTS_PATH}/{update_account.account_id}/", json=operations)
            account = _account(self._snake_json(r, 200, operation="update account"))
        if update_account.secret:
            await self.update_account_credentials_in_vault(
                update_account.account_id, update_account.secret
            )
        return account

    async def update_account_credentials_in_vault(
        self, account_id: str, new_credentials: str
    ) -> None:
        log.info("update_account_credentials_in_vault", account_id=account_id)
        r = await self._rest.post(
            f"{ACCOUNTS_PATH}/{account_id}/password/update",
            json={"newCredentials": new_credentials},
        )
        expect(r, 200, operation="update account credentials in vault")

    async def delete_account(self, account_id: str) -> None:
        log.info("delete_account", account_id=account_id)
        r = await self._rest.delete(f"{ACCOUNTS_PATH}/{account_id}/")
        expect(r, 204, operation="delete account")

    async def list_account_secret_versions(self, account_id: str) -> list[AccountSecretVersion]:
        log.info("list_account_secret_versions", account_id=account_id)
        r = await self._rest.get(f"{ACCOUNTS_PATH}/{account_id}/secret/versions")
        data = self._snake_json(r, 200, operation="list account secret versions")
        return [AccountSecretVersion.model_validate(v) for v in data.get("versions") or []]

    async def generate_account_credentials(self, account_id: str) -> AccountCredentials:
        log.info("generate_account_credentials", account_id=account_id)
        r = await self._rest.post(f"{ACCOUNTS_PATH}/{account_id}/secret/generate")
        data = self._snake_json(r, 200, operation="generate account credentials")
        return AccountCredentials(account_id=account_id, password=str(data.get("password") or ""))

    async def _credentials_action(self, account_id: str, action: str, *, body: Any = None) -> None:
        log.info("account_credentials_action", account_id=account_id, action=action)
        r = await self._rest.post(f"{ACCOUNTS_PATH}/{account_id}/{action}", json=body)
        expect(r, 200, operation=f"{action} account credentials")

    async def verify_account_credentials(self, account_id: str) -> None:
        await self._credentials_action(account_id, "verify")

    async def change_account_credentials(self, account_id: str) -> None:
        await self._credentials_action(account_id, "change")

    async def reconcile_account_credentials(self, account_id: str) -> None:
        await self._credentials_action(account_id, "reconcile")

    async def set_account_next_credentials(self, request: SetAccountNextCredentials) -> None:
        await self._credentials_action(
            request.account_id, "setnextpassword", body=request.body(exclude={"account_id"})
        )

    async def link_account(self, link_account: LinkAccount) -> None:
        log.info(
            "link_account",
            account_id=link_account.account_id,
            extra_password_index=link_account.extra_password_index,
        )
        r = await self._rest.post(
            f"{ACCOUNTS_PATH}/{link_account.account_id}/linkaccount",
            json=link_account.body(exclude={"account_id"}),
        )
        expect(r, 200, operation="link account")

    async def unlink_account(self, unlink_account: UnlinkAccount) -> None:
        log.info(
            "unlink_account",
            account_id=unlink_account.account_id,
            extra_password_index=unlink_account.extra_password_index,
        )
        r = await self._rest.delete(
            f"{ACCOUNTS_PATH}/{unlink_account.account_id}/linkaccount/"
            f"{unlink_account.extra_password_index}/"
        )
        expect(r, 200, operation="unlink account")

    async def accounts_stats(self) -> AccountsStats:
        log.info("accounts_stats")
        accounts = await collect(self.list_accounts())
        return AccountsStats(
            accounts_count=len(accounts),
            accounts_count_by_platform_id=dict(Counter(a.platform_id for a in accounts)),
            accounts_count_by_safe_name=dict(Counter(a.safe_name for a in accounts)),
        )


# --- Module Notes -----------------------------------------------------------
# Listing failures end the stream (see `paging.PageStream.error`); single-resource
# operations raise ApiError/TransportError.
