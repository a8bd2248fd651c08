"""
privaccess_sdk.services.sia.workspaces_db

Database targets (workspaces) service.

Responsibilities:
- List database targets with server-side family/paging and client-side filters.
- Create, read, update and delete database targets, resolving targets by name when needed.
- Compute inventory statistics, including configuration warnings.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from privaccess_sdk.clients.json_case import camel_keys
from privaccess_sdk.clients.rest import expect
from privaccess_sdk.errors import ApiError, InvalidRequestError
from privaccess_sdk.models.db_targets import (
    DATABASE_ENGINE_TYPES,
    DATABASE_FAMILY_DEFAULT_PORTS,
    AddDatabaseTarget,
    DatabaseTargetInfo,
    DatabaseTargetInfoList,
    DatabaseTargetsFilter,
    DatabaseTargetsStats,
    DatabaseWarning,
    UpdateDatabaseTarget,
    engine_family,
)
from privaccess_sdk.observability.logging import get_logger
from privaccess_sdk.services.sia.base import SiaService, compile_pattern

log = get_logger(__name__)

DATABASE_TARGETS_PATH = "api/database-targets"


def _warnings(target: DatabaseTargetInfo) -> list[DatabaseWarning]:
    found: list[DatabaseWarning] = []
    if not target.certificate:
        found.append(DatabaseWarning.no_certificates)
    if not target.secret_id:
        found.append(DatabaseWarning.no_secrets)
    return found


def _matches_warning(target: DatabaseTargetInfo, wanted: DatabaseWarning) -> bool:
    found = _warnings(target)
    if wanted == DatabaseWarning.any_error:
        return bool(found)
    return wanted in found


class DBWorkspaceService(SiaService):
    SERVICE_NAME = "sia-workspaces-db"

    async def _list(
        self, *, provider_family: str | None, limit: int | None, offset: int | None
    ) -> DatabaseTargetInfoList:
        params: dict[str, str] = {}
        if provider_family:
            # Parameter name as accepted by the platform.
            params["provideFamily"] = provider_family
        if limit:
            params["limit"] = str(limit)
        if offset is not None:
            params["offset"] = str(offset)
        r = await self._rest.get(DATABASE_TARGETS_PATH, params=params or None)
        return DatabaseTargetInfoList.model_validate(
            self._snake_json(r, 200, operation="list database targets")
        )

    async def list_database_targets(self) -> DatabaseTargetInfoList:
        log.info("list_database_targets")
        return await self._list(provider_family=None, limit=None, offset=None)

    async def list_database_targets_by(
        self, targets_filter: DatabaseTargetsFilter
    ) -> DatabaseTargetInfoList:
        engine = targets_filter.provider_engine
        if engine and engine not in DATABASE_ENGINE_TYPES:
            raise InvalidRequestError(f"invalid provider engine: {engine}")
        name_re = compile_pattern(targets_filter.name, field="name") if targets_filter.name else None
        log.info("list_database_targets_by", filter=targets_filter.model_dump(exclude_none=True))
        listed = await self._list(
            provider_family=targets_filter.provider_family,
            limit=targets_filter.limit,
            offset=targets_filter.offset,
        )
        items = [
            t
            for t in listed.items
            if (name_re is None or name_re.search(t.name))
            and (not engine or t.provider_engine == engine)
            and (
                not targets_filter.auth_methods
                or t.configured_auth_method_type in targets_filter.auth_methods
            )
            and (
                targets_filter.db_warnings_filter is None
                or _matches_warning(t, targets_filter.db_warnings_filter)
            )
        ]
        return DatabaseTargetInfoList(items=items, total_count=len(items))

    async def database_target(self, target_id: str) -> DatabaseTargetInfo:
        log.info("get_database_target", target_id=target_id)
        r = await self._rest.get(f"{DATABASE_TARGETS_PATH}/{target_id}")
        return DatabaseTargetInfo.model_validate(
            self._snake_json(r, 200, operation="get database target")
        )

    async def delete_database_target(self, target_id: str) -> None:
        log.info("delete_database_target", target_id=target_id)
        r = await self._rest.delete(f"{DATABASE_TARGETS_PATH}/{target_id}")
        expect(r, 204, operation="delete database target")

    async def _target_id_by_name(self, name: str) -> str:
        matches = [t for t in (await self.list_database_targets()).items if t.name == name]
        if len(matches) != 1:
            raise InvalidRequestError(f"expected exactly one database target named {name!r}, found {len(matches)}")
        return matches[0].id

    async def add_database_target(self, add_target: AddDatabaseTarget) -> DatabaseTargetInfo:
        engine = add_target.provider_engine
        if engine not in DATABASE_ENGINE_TYPES:
            raise InvalidRequestError(f"invalid provider engine: {engine}")
        body: dict[str, Any] = add_target.model_dump(mode="json", exclude_none=True)
        if not add_target.port:
            family = engine_family(engine)
            if family is None:
                raise InvalidRequestError(f"unknown provider engine: {engine}")
            body["port"] = DATABASE_FAMILY_DEFAULT_PORTS[family]
        body.setdefault("services", [])

        log.info("add_database_target", name=add_target.name, provider_engine=engine, port=body["port"])
        r = await self._rest.post(DATABASE_TARGETS_PATH, json=camel_keys(body))
        created = self._snake_json(r, 201, operation="add database target")
        target_id = created.get("id") if isinstance(created, dict) else None
        if not target_id:
            raise ApiError("add database target", r.status_code, "missing target id in response")
        return await self.database_target(target_id)

    async def update_database_target(self, update_target: UpdateDatabaseTarget) -> DatabaseTargetInfo:
        engine = update_target.provider_engine
        if engine and engine not in DATABASE_ENGINE_TYPES:
            raise InvalidRequestError(f"invalid provider engine: {engine}")
        target_id = update_target.id
        if not target_id:
            if not update_target.name:
                raise InvalidRequestError("either id or name is required")
            target_id = await self._target_id_by_name(update_target.name)

        existing = await self.database_target(target_id)
        merged = existing.model_dump(mode="json", exclude_none=True, exclude={"id"})
        merged.update(update_target.model_dump(mode="json", exclude_none=True, exclude={"id", "name", "new_name"}))
        merged["name"] = update_target.new_name or update_target.name or existing.name

        log.info("update_database_target", target_id=target_id)
        r = await self._rest.put(f"{DATABASE_TARGETS_PATH}/{target_id}", json=camel_keys(merged))
        expect(r, 200, operation="update database target")
        return await self.database_target(target_id)

    async def database_targets_stats(self) -> DatabaseTargetsStats:
        log.info("database_targets_stats")
        targets = (await self.list_database_targets()).items
        warnings = Counter(str(w) for t in targets for w in _warnings(t))
        return DatabaseTargetsStats(
            databases_count=len(targets),
            databases_without_secret_count=warnings[DatabaseWarning.no_secrets],
            databases_without_certificates_count=warnings[DatabaseWarning.no_certificates],
            databases_count_by_engine=dict(Counter(t.provider_engine for t in targets)),
            databases_count_by_workspace=dict(Counter(t.platform or "" for t in targets)),
            databases_count_by_auth_method=dict(
                Counter(t.configured_auth_method_type or "" for t in targets)
            ),
            databases_count_by_warning=dict(warnings),
        )
