"""
privaccess_sdk.services.pcloud.safes

Vault safes and safe members service.

Responsibilities:
- List safes and safe members as lazy page streams.
- Classify every member's permissions into a named tier.
- Expand named tiers into explicit permissions when adding or updating members.
- Compute per-safe and tenant-wide membership statistics (concurrent fan-out).
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from privaccess_sdk.aggregation import aggregate
from privaccess_sdk.clients.rest import expect
from privaccess_sdk.errors import InvalidRequestError
from privaccess_sdk.models.safes import (
    AddSafe,
    AddSafeMember,
    Safe,
    SafeMember,
    SafeMembersFilter,
    SafeMembersStats,
    SafesFilter,
    SafesMembersStats,
    SafesStats,
    UpdateSafe,
    UpdateSafeMember,
)
from privaccess_sdk.observability.logging import get_logger
from privaccess_sdk.paging import PageStream, collect, remap_keys, stream_pages
from privaccess_sdk.permissions import PermissionTier, SafeMemberPermissions, classify, reverse_lookup
from privaccess_sdk.services.pcloud.base import VaultService

log = get_logger(__name__)

SAFES_PATH = "api/safes"

_SAFE_REMAP = remap_keys({"safe_url_id": "safe_id"})


def _safe(data: dict[str, Any]) -> Safe:
    return Safe.model_validate(_SAFE_REMAP(data))


def _member(data: dict[str, Any]) -> SafeMember:
    member = SafeMember.model_validate(_SAFE_REMAP(data))
    return member.model_copy(update={"permission_set": classify(member.permissions)})


def _resolve_permissions(
    tier: PermissionTier | str | None,
    permissions: SafeMemberPermissions | None,
) -> SafeMemberPermissions | None:
    if tier == PermissionTier.custom:
        return permissions
    # Raises UnknownPermissionTierError for names outside the canonical table.
    return reverse_lookup(tier) if tier else permissions


class SafesService(VaultService):
    SERVICE_NAME = "pcloud-safes"

    # --- safes --------------------------------------------------------------

    def _list_safes(self, query: dict[str, Any]) -> PageStream[Safe]:
        return stream_pages(
            self._rest,
            SAFES_PATH,
            query=query,
            items_keys=("value", "Safes"),
            remap=_SAFE_REMAP,
            decode_item=Safe.model_validate,
            name="list_safes",
        )

    def list_safes(self) -> PageStream[Safe]:
        log.info("list_safes")
        return self._list_safes({})

    def list_safes_by(self, safes_filter: SafesFilter) -> PageStream[Safe]:
        log.info("list_safes_by", filter=safes_filter.model_dump(exclude_none=True))
        query: dict[str, Any] = {}
        if safes_filter.search:
            query["search"] = safes_filter.search
        if safes_filter.sort:
            query["sort"] = safes_filter.sort
        if safes_filter.offset:
            query["offset"] = str(safes_filter.offset)
        if safes_filter.limit:
            query["limit"] = str(safes_filter.limit)
        return self._list_safes(query)

    async def safe(self, safe_id: str) -> Safe:
        log.info("get_safe", safe_id=safe_id)
        r = await self._rest.get(f"{SAFES_PATH}/{safe_id}/")
        return _safe(self._snake_json(r, 200, operation="retrieve safe"))

    async def add_safe(self, add_safe: AddSafe) -> Safe:
        log.info("add_safe", safe_name=add_safe.safe_name)
        body = add_safe.body(exclude={"managing_cpm"})
        # Exact key; camel conversion would produce `managingCpm`.
        body["managingCPM"] = add_safe.managing_cpm
        body["olacEnabled"] = add_safe.olac_enabled
        # Only one retention policy may be sent; default to zero days when neither is set.
        if "numberOfDaysRetention" in body:
            body.pop("numberOfVersionsRetention", None)
        elif "numberOfVersionsRetention" not in body:
            body["numberOfDaysRetention"] = 0
        r = await self._rest.post(SAFES_PATH, json=body)
        return _safe(self._snake_json(r, 201, operation="add safe"))

    async def update_safe(self, update_safe: UpdateSafe) -> Safe:
        log.info("update_safe", safe_id=update_safe.safe_id)
        body = update_safe.body(exclude={"safe_id", "managing_cpm"})
        if update_safe.managing_cpm is not None:
            body["managingCPM"] = update_safe.managing_cpm
        if not body:
            return await self.safe(update_safe.safe_id)
        if "numberOfDaysRetention" in body:
            body.pop("numberOfVersionsRetention", None)
        r = await self._rest.put(f"{SAFES_PATH}/{update_safe.safe_id}/", json=body)
        return _safe(self._snake_json(r, 200, operation="update safe"))

    async def delete_safe(self, safe_id: str) -> None:
        log.info("delete_safe", safe_id=safe_id)
        r = await self._rest.delete(f"{SAFES_PATH}/{safe_id}/")
        expect(r, 204, operation="delete safe")

    # --- members ------------------------------------------------------------

    def _list_members(self, safe_id: str, query: dict[str, Any]) -> PageStream[SafeMember]:
        return stream_pages(
            self._rest,
            f"{SAFES_PATH}/{safe_id}/members",
            query=query,
            items_keys=("value",),
            remap=_SAFE_REMAP,
            decode_item=_member,
            name="list_safe_members",
        )

    def list_safe_members(self, safe_id: str) -> PageStream[SafeMember]:
        log.info("list_safe_members", safe_id=safe_id)
        return self._list_members(safe_id, {})

    def list_safe_members_by(self, members_filter: SafeMembersFilter) -> PageStream[SafeMember]:
        log.info("list_safe_members_by", filter=members_filter.model_dump(exclude_none=True))
        query: dict[str, Any] = {}
        if members_filter.search:
            query["search"] = members_filter.search
        if members_filter.sort:
            query["sort"] = members_filter.sort
        if members_filter.offset:
            query["offset"] = str(members_filter.offset)
        if members_filter.limit:
            query["limit"] = str(members_filter.limit)
        if members_filter.member_type:
            query["filter"] = f"memberType eq {members_filter.member_type}"
        return self._list_members(members_filter.safe_id, query)

    async def safe_member(self, safe_id: str, member_name: str) -> SafeMember:
        log.info("get_safe_member", safe_id=safe_id, member_name=member_name)
        r = await self._rest.get(f"{SAFES_PATH}/{safe_id}/members/{member_name}/")
        return _member(self._snake_json(r, 200, operation="retrieve safe member"))

    async def add_safe_member(self, add_member: AddSafeMember) -> SafeMember:
        log.info("add_safe_member", safe_id=add_member.safe_id, member_name=add_member.member_name)
        tier = add_member.permission_set
        if tier is None and add_member.permissions is None:
            tier = PermissionTier.read_only
        if tier == PermissionTier.custom and add_member.permissions is None:
            raise InvalidRequestError("permission set is custom but permissions are not set")
        permissions = _resolve_permissions(tier, add_member.permissions)
        body = add_member.model_copy(update={"permissions": permissions}).body(
            exclude={"permission_set", "safe_id"}
        )
        r = await self._rest.post(f"{SAFES_PATH}/{add_member.safe_id}/members", json=body)
        return _member(self._snake_json(r, 201, operation="add safe member"))

    async def update_safe_member(self, update_member: UpdateSafeMember) -> SafeMember:
        log.info(
            "update_safe_member",
            safe_id=update_member.safe_id,
            member_name=update_member.member_name,
        )
        permissions = _resolve_permissions(update_member.permission_set, update_member.permissions)
        body = update_member.model_copy(update={"permissions": permissions}).body(
            exclude={"permission_set", "safe_id", "member_name"}
        )
        if not body:
            return await self.safe_member(update_member.safe_id, update_member.member_name)
        r = await self._rest.put(
            f"{SAFES_PATH}/{update_member.safe_id}/members/{update_member.member_name}/",
            json=body,
        )
        return _member(self._snake_json(r, 200, operation="update safe member"))

    async def delete_safe_member(self, safe_id: str, member_name: str) -> None:
        log.info("delete_safe_member", safe_id=safe_id, member_name=member_name)
        r = await self._rest.delete(f"{SAFES_PATH}/{safe_id}/members/{member_name}/")
        expect(r, 204, operation="delete safe member")

    # --- stats --------------------------------------------------------------

    async def safes_stats(self) -> SafesStats:
        log.info("safes_stats")
        safes = await collect(self.list_safes())
        return SafesStats(
            safes_count=len(safes),
            safes_count_by_location=dict(Counter(s.location for s in safes)),
            safes_count_by_creator=dict(Counter(s.creator.name for s in safes)),
        )

    async def safe_members_stats(self, safe_id: str) -> SafeMembersStats:
        log.info("safe_members_stats", safe_id=safe_id)
        members = await collect(self.list_safe_members(safe_id))
        return SafeMembersStats(
            safe_members_count=len(members),
            safe_members_permission_sets=dict(Counter(str(m.permission_set) for m in members)),
            safe_members_types_count=dict(Counter(m.member_type for m in members)),
        )

    async def safes_members_stats(
        self, *, max_concurrency: int | None = None
    ) -> SafesMembersStats:
        """
        Member statistics for every safe, keyed by safe name.

        One worker per safe, started as soon as the safe's page arrives. Raises the
        first worker error after all workers finish.
        """
        log.info("safes_members_stats")
        limit = max_concurrency if max_concurrency is not None else self._settings.fan_out_limit
        async with self.list_safes() as safes:
            stats = await aggregate(
                safes.items(),
                lambda safe: self.safe_members_stats(safe.safe_id),
                key=lambda safe: safe.safe_name,
                max_concurrency=limit,
            )
        return SafesMembersStats(safe_members_stats=stats)


# --- Module Notes -----------------------------------------------------------
# Member tiers are derived on read (`classify`) and expanded on write
# (`reverse_lookup`); `custom` is never sent to the platform.
