"""
privaccess_sdk.services.sia.secrets_db

Database secrets service.

Responsibilities:
- Stream database strong accounts with cursor pagination.
- Create, read, update and delete strong accounts.
- Validate strong-account properties against the platform they target.
- Expose the legacy database secrets API (deprecated, logged as such).
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from privaccess_sdk.clients.json_case import camel_keys
from privaccess_sdk.clients.rest import expect
from privaccess_sdk.errors import ApiError, InvalidRequestError
from privaccess_sdk.models.db_secrets import (
    PAM_REQUIRED_PROPERTIES,
    PLATFORM_OPTIONAL_PROPERTIES,
    PLATFORM_REQUIRED_PROPERTIES,
    SECRET_TYPE_STORE,
    STRONG_ACCOUNTS_MAX_LIMIT,
    STRONG_ACCOUNTS_MIN_LIMIT,
    AddSecret,
    AddStrongAccount,
    SecretDataRequest,
    SecretMetadata,
    SecretMetadataList,
    SecretsFilter,
    SecretsStats,
    SecretType,
    StoreType,
    StrongAccount,
    StrongAccountRequest,
    UpdateSecret,
    UpdateStrongAccount,
    password_field,
)
from privaccess_sdk.observability.logging import get_logger
from privaccess_sdk.paging import PageStream, next_token_cursor, stream_pages
from privaccess_sdk.services.sia.base import SiaService, compile_pattern

log = get_logger(__name__)

STRONG_ACCOUNTS_PATH = "api/database-strong-accounts"
SECRETS_PATH = "api/adb/secretsmgmt/secrets"


def _flatten_strong_account(item: dict[str, Any]) -> dict[str, Any]:
    # Store-specific fields arrive nested under `account_properties`.
    props = item.pop("account_properties", None)
    if isinstance(props, dict):
        for k, v in props.items():
            if v not in (None, "") and k not in item:
                item[k] = v
    return item


def _parse_tags(item: dict[str, Any]) -> dict[str, Any]:
    # [{"key": k, "value": v}, ...] -> {k: v}
    tags = item.get("tags")
    if isinstance(tags, list):
        item["tags"] = {
            t["key"]: t["value"]
            for t in tags
            if isinstance(t, dict) and isinstance(t.get("key"), str) and isinstance(t.get("value"), str)
        }
    return item


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, (str, int)):
        return bool(value)
    return True


def _account_properties(store_type: StoreType, fields: dict[str, Any]) -> dict[str, Any]:
    if store_type == StoreType.pam:
        missing = [f for f in PAM_REQUIRED_PROPERTIES if not _has_value(fields.get(f))]
        if missing:
            raise InvalidRequestError(f"{missing[0]} is required for pam accounts")
        return {f: fields[f] for f in PAM_REQUIRED_PROPERTIES}

    platform = fields.get("platform")
    if not platform:
        raise InvalidRequestError("platform is required for managed accounts")
    if platform not in PLATFORM_REQUIRED_PROPERTIES:
        raise InvalidRequestError(f"unsupported platform: {platform}")
    props: dict[str, Any] = {"platform": platform}
    for f in PLATFORM_REQUIRED_PROPERTIES[platform]:
        if not _has_value(fields.get(f)):
            raise InvalidRequestError(f"{f} is required for platform {platform}")
        props[f] = fields[f]
    for f in PLATFORM_OPTIONAL_PROPERTIES.get(platform, ()):
        if _has_value(fields.get(f)):
            props[f] = fields[f]
    return props


def _password_secret_object(platform: str, fields: dict[str, Any], *, optional: bool) -> dict[str, Any] | None:
    has_password = _has_value(fields.get("password"))
    has_key = _has_value(fields.get("secret_access_key"))
    if optional and not (has_password or has_key):
        return None
    expected = password_field(platform)
    if (has_password or has_key) and not _has_value(fields.get(expected)):
        raise InvalidRequestError(f"{platform} platform requires {expected} in the password secret object")
    if not _has_value(fields.get(expected)):
        raise InvalidRequestError(f"{expected} is required for platform {platform}")
    return {expected: fields[expected]}


def _strong_account_body(request: StrongAccountRequest, fields: dict[str, Any], *, password_optional: bool) -> dict[str, Any]:
    body: dict[str, Any] = {
        "store_type": request.store_type.value,
        "name": fields.get("name"),
        "account_properties": _account_properties(request.store_type, fields),
    }
    if request.store_type == StoreType.managed:
        password = _password_secret_object(fields["platform"], fields, optional=password_optional)
        if password is not None:
            body["password_secret_object"] = password
    return camel_keys({k: v for k, v in body.items() if v is not None})


def _tag_list(tags: dict[str, str]) -> list[dict[str, str]]:
    return [{"key": k, "value": v} for k, v in tags.items() if k]


def _secret_updates(request: SecretDataRequest) -> dict[str, Any]:
    # Each credential group is all-or-nothing; an absent group is left untouched.
    body: dict[str, Any] = {}
    groups: list[tuple[str, dict[str, str | None]]] = [
        ("secret_link", {"safe": request.pam_safe, "account_name": request.pam_account_name}),
        ("secret_data", {"username": request.username, "password": request.password}),
        (
            "secret_data",
            {
                "account": request.iam_account,
                "username": request.iam_username,
                "access_key_id": request.iam_access_key_id,
                "secret_access_key": request.iam_secret_access_key,
            },
        ),
        ("secret_data", {"public_key": request.atlas_public_key, "private_key": request.atlas_private_key}),
    ]
    for target, group in groups:
        given = [v for v in group.values() if v]
        if not given:
            continue
        if len(given) != len(group):
            raise InvalidRequestError(f"all of {', '.join(group)} must be supplied together")
        body[target] = dict(group)
    return body


_SECRET_TYPE_GROUP: dict[str, tuple[str, tuple[str, ...]]] = {
    SecretType.username_password: ("secret_data", ("username", "password")),
    SecretType.cyberark_pam: ("secret_link", ("pam_safe", "pam_account_name")),
    SecretType.iam_user: (
        "secret_data",
        ("iam_account", "iam_username", "iam_access_key_id", "iam_secret_access_key"),
    ),
    SecretType.atlas_access_keys: ("secret_data", ("atlas_public_key", "atlas_private_key")),
}

_SECRET_WIRE_NAMES = {
    "pam_safe": "safe",
    "pam_account_name": "account_name",
    "iam_account": "account",
    "iam_username": "username",
    "iam_access_key_id": "access_key_id",
    "iam_secret_access_key": "secret_access_key",
    "atlas_public_key": "public_key",
    "atlas_private_key": "private_key",
}


class DBSecretsService(SiaService):
    SERVICE_NAME = "sia-secrets-db"

    # --- strong accounts ----------------------------------------------------

    def list_strong_accounts(self, limit: int | None = None) -> PageStream[StrongAccount]:
        limit = self._settings.strong_accounts_page_limit if limit is None else limit
        if not STRONG_ACCOUNTS_MIN_LIMIT <= limit <= STRONG_ACCOUNTS_MAX_LIMIT:
            raise InvalidRequestError(
                f"limit must be between {STRONG_ACCOUNTS_MIN_LIMIT} and "
                f"{STRONG_ACCOUNTS_MAX_LIMIT}, got {limit}"
            )
        log.info("list_strong_accounts", limit=limit)
        return stream_pages(
            self._rest,
            STRONG_ACCOUNTS_PATH,
            query={"limit": str(limit)},
            items_keys=("items",),
            remap=_flatten_strong_account,
            decode_item=StrongAccount.model_validate,
            cursor=next_token_cursor(extra={"limit": str(limit)}),
            name="list_strong_accounts",
        )

    async def strong_account(self, strong_account_id: str) -> StrongAccount:
        if not strong_account_id:
            raise InvalidRequestError("id is required")
        log.info("get_strong_account", strong_account_id=strong_account_id)
        r = await self._rest.get(f"{STRONG_ACCOUNTS_PATH}/{strong_account_id}")
        data = self._snake_json(r, 200, operation="get db strong account")
        return StrongAccount.model_validate(_flatten_strong_account(data))

    async def delete_strong_account(self, strong_account_id: str) -> None:
        if not strong_account_id:
            raise InvalidRequestError("id is required")
        log.info("delete_strong_account", strong_account_id=strong_account_id)
        r = await self._rest.delete(f"{STRONG_ACCOUNTS_PATH}/{strong_account_id}")
        expect(r, 204, operation="delete db strong account")

    async def add_strong_account(self, add_strong_account: AddStrongAccount) -> StrongAccount:
        if not add_strong_account.name:
            raise InvalidRequestError("name is required")
        body = _strong_account_body(
            add_strong_account, add_strong_account.model_dump(), password_optional=False
        )
        log.info("add_strong_account", name=add_strong_account.name, store_type=add_strong_account.store_type)
        r = await self._rest.post(STRONG_ACCOUNTS_PATH, json=body)
        created = self._snake_json(r, 201, operation="add db strong account")
        log.info("strong_account_added", strong_account_id=created.get("id"))
        return await self.strong_account(created["id"])

    async def update_strong_account(self, update_strong_account: UpdateStrongAccount) -> StrongAccount:
        """
        Replace a strong account.

        The request must carry every property its store type requires (the platform and its
        required properties for managed accounts, safe and account name for pam accounts).
        Optional properties left unset keep their stored values. The password is only sent
        when the request supplies one.
        """
        account_id = update_strong_account.strong_account_id
        if not account_id:
            raise InvalidRequestError("id is required")
        requested = update_strong_account.model_dump(exclude={"strong_account_id"})
        if update_strong_account.store_type == StoreType.managed:
            platform = requested.get("platform")
            if not platform:
                raise InvalidRequestError("platform is required for managed accounts")
            if platform not in PLATFORM_REQUIRED_PROPERTIES:
                raise InvalidRequestError(f"unsupported platform: {platform}")
            required = PLATFORM_REQUIRED_PROPERTIES[platform]
        else:
            required = PAM_REQUIRED_PROPERTIES
        for f in required:
            if not _has_value(requested.get(f)):
                raise InvalidRequestError(f"{f} is required when updating a {update_strong_account.store_type} account")

        log.info("update_strong_account", strong_account_id=account_id)
        existing = (await self.strong_account(account_id)).model_dump()
        merged = dict(requested)
        for k, v in existing.items():
            if not _has_value(merged.get(k)) and _has_value(v):
                merged[k] = v
        body = _strong_account_body(update_strong_account, merged, password_optional=True)

        r = await self._rest.put(f"{STRONG_ACCOUNTS_PATH}/{account_id}", json=body)
        updated = self._snake_json(r, 200, operation="update db strong account")
        return await self.strong_account(updated.get("id") or account_id)

    # --- legacy secrets -----------------------------------------------------

    async def _list_secrets(
        self, secret_type: str | None, tags: dict[str, str] | None
    ) -> SecretMetadataList:
        params: dict[str, str] = dict(tags or {})
        if secret_type:
            params["secret_type"] = secret_type
        r = await self._rest.get(SECRETS_PATH, params=params or None)
        data = self._snake_json(r, 200, operation="list secrets")
        if not isinstance(data, dict):
            raise ApiError("list secrets", r.status_code, "unexpected result")
        for s in data.get("secrets") or []:
            if isinstance(s, dict):
                _parse_tags(s)
        return SecretMetadataList.model_validate(data)

    async def list_secrets(self) -> SecretMetadataList:
        log.warning("deprecated_call", operation="list_secrets", use_instead="list_strong_accounts")
        return await self._list_secrets(None, None)

    async def list_secrets_by(self, secrets_filter: SecretsFilter) -> SecretMetadataList:
        log.warning("deprecated_call", operation="list_secrets_by", use_instead="list_strong_accounts")
        pattern = (
            compile_pattern(secrets_filter.secret_name, field="secret_name") if secrets_filter.secret_name else None
        )
        listed = await self._list_secrets(secrets_filter.secret_type, secrets_filter.tags)
        secrets = listed.secrets
        if secrets_filter.store_type:
            secrets = [s for s in secrets if s.secret_store.store_type == secrets_filter.store_type]
        if pattern is not None:
            secrets = [s for s in secrets if s.secret_name and pattern.search(s.secret_name)]
        if secrets_filter.is_active:
            secrets = [s for s in secrets if s.is_active]
        return SecretMetadataList(total_count=len(secrets), secrets=secrets)

    async def secret(self, secret_id: str) -> SecretMetadata:
        log.warning("deprecated_call", operation="secret", use_instead="strong_account")
        log.info("get_secret", secret_id=secret_id)
        r = await self._rest.get(f"{SECRETS_PATH}/{secret_id}")
        data = self._snake_json(r, 200, operation="retrieve db secret")
        return SecretMetadata.model_validate(_parse_tags(data))

    async def delete_secret(self, secret_id: str) -> None:
        log.warning("deprecated_call", operation="delete_secret", use_instead="delete_strong_account")
        log.info("delete_secret", secret_id=secret_id)
        r = await self._rest.delete(f"{SECRETS_PATH}/{secret_id}")
        expect(r, 204, operation="delete db secret")

    async def _resolve_secret_id(self, secret_id: str | None, secret_name: str | None) -> str:
        if secret_id:
            return secret_id
        if not secret_name:
            raise InvalidRequestError("secret id or secret name is required")
        found = (await self.list_secrets_by(SecretsFilter(secret_name=secret_name))).secrets
        if not found:
            raise InvalidRequestError(f"no secret matches name {secret_name!r}")
        return found[0].secret_id

    async def add_secret(self, add_secret: AddSecret) -> SecretMetadata:
        log.warning("deprecated_call", operation="add_secret", use_instead="add_strong_account")
        store_type = add_secret.store_type or SECRET_TYPE_STORE[add_secret.secret_type]
        body: dict[str, Any] = {
            "secret_store": {"store_type": store_type.value},
            "secret_name": add_secret.secret_name,
            "secret_type": add_secret.secret_type.value,
        }
        if add_secret.description:
            body["description"] = add_secret.description
        if add_secret.purpose:
            body["purpose"] = add_secret.purpose
        if add_secret.tags is not None:
            body["tags"] = _tag_list(add_secret.tags)

        target, names = _SECRET_TYPE_GROUP[add_secret.secret_type]
        values = {n: getattr(add_secret, n) for n in names}
        if not all(values.values()):
            raise InvalidRequestError(
                f"{', '.join(names)} must be supplied for {add_secret.secret_type} secrets"
            )
        body[target] = {_SECRET_WIRE_NAMES.get(n, n): v for n, v in values.items()}

        log.info("add_secret", secret_name=add_secret.secret_name, secret_type=add_secret.secret_type)
        r = await self._rest.post(SECRETS_PATH, json=body)
        data = self._snake_json(r, 201, operation="add db secret")
        return SecretMetadata.model_validate(_parse_tags(data))

    async def update_secret(self, update_secret: UpdateSecret) -> SecretMetadata:
        log.warning("deprecated_call", operation="update_secret", use_instead="update_strong_account")
        body = _secret_updates(update_secret)
        secret_id = await self._resolve_secret_id(update_secret.secret_id, update_secret.secret_name)
        name = update_secret.new_secret_name or update_secret.secret_name
        if name:
            body["secret_name"] = name
        if update_secret.description:
            body["description"] = update_secret.description
        if update_secret.purpose:
            body["purpose"] = update_secret.purpose
        if update_secret.tags is not None:
            body["tags"] = _tag_list(update_secret.tags)

        log.info("update_secret", secret_id=secret_id)
        r = await self._rest.patch(f"{SECRETS_PATH}/{secret_id}", json=body)
        data = self._snake_json(r, 200, operation="update db secret")
        return SecretMetadata.model_validate(_parse_tags(data))

    async def _toggle_secret(self, action: str, secret_id: str | None, secret_name: str | None) -> None:
        log.warning("deprecated_call", operation=f"{action}_secret")
        resolved = await self._resolve_secret_id(secret_id, secret_name)
        log.info(f"{action}_secret", secret_id=resolved)
        r = await self._rest.post(f"{SECRETS_PATH}/{resolved}/{action}")
        expect(r, 200, operation=f"{action} db secret")

    async def enable_secret(self, secret_id: str | None = None, *, secret_name: str | None = None) -> None:
        await self._toggle_secret("enable", secret_id, secret_name)

    async def disable_secret(self, secret_id: str | None = None, *, secret_name: str | None = None) -> None:
        await self._toggle_secret("disable", secret_id, secret_name)

    async def secrets_stats(self) -> SecretsStats:
        log.warning("deprecated_call", operation="secrets_stats")
        secrets = (await self._list_secrets(None, None)).secrets
        active = sum(1 for s in secrets if s.is_active)
        return SecretsStats(
            secrets_count=len(secrets),
            active_secrets_count=active,
            inactive_secrets_count=len(secrets) - active,
            secrets_count_by_secret_type=dict(Counter(s.secret_type for s in secrets if s.secret_type)),
            secrets_count_by_store_type=dict(
                Counter(s.secret_store.store_type for s in secrets if s.secret_store.store_type)
            ),
        )


# --- Module Notes -----------------------------------------------------------
# Strong-account listing re-sends `limit` with every cursor so page sizes stay stable.
