"""
privaccess_sdk.services.pcloud.platforms

Vault platforms service.

Responsibilities:
- List and read platforms, and compute platform statistics.
- Manage target platforms (list, read, activate, deactivate, duplicate, delete).
- Import platforms from zip packages and export them to a local folder.
"""

from __future__ import annotations

import asyncio
import base64
import fnmatch
from collections import Counter
from pathlib import Path
from typing import Any

from privaccess_sdk.clients.rest import expect
from privaccess_sdk.errors import ApiError, InvalidRequestError
from privaccess_sdk.models.platforms import (
    DuplicatedTargetPlatformInfo,
    DuplicateTargetPlatform,
    Platform,
    PlatformDetails,
    PlatformsFilter,
    PlatformsStats,
    TargetPlatform,
    TargetPlatformsFilter,
    TargetPlatformsStats,
)
from privaccess_sdk.observability.logging import get_logger
from privaccess_sdk.paging import extract_items
from privaccess_sdk.services.pcloud.base import VaultService

log = get_logger(__name__)

PLATFORMS_PATH = "api/platforms"
TARGET_PLATFORMS_PATH = "api/platforms/targets"

# TargetPlatformsFilter flag -> server-side filter clause.
_TARGET_FLAG_CLAUSES = {
    "active": "active eq true",
    "periodic_verify": "periodicVerify eq true",
    "manual_verify": "manualVerify eq true",
    "periodic_change": "periodicChange eq true",
    "manual_change": "manualChange eq true",
    "automatic_reconcile": "automaticReconcile eq true",
    "manual_reconcile": "manualReconcile eq true",
}


def _platform(data: dict[str, Any]) -> Platform:
    general = data.get("general")
    # Platform type may arrive upper-cased.
    if isinstance(general, dict) and isinstance(general.get("platform_type"), str):
        general["platform_type"] = general["platform_type"].lower()
    return Platform.model_validate(data)


def _wildcard(pattern: str | None, value: str) -> bool:
    return not pattern or fnmatch.fnmatchcase(value.lower(), pattern.lower())


async def _read_package(path: str) -> str:
    package = Path(path)
    if not package.is_file():
        raise InvalidRequestError(f"given path {path!r} does not exist or is invalid")
    data = await asyncio.to_thread(package.read_bytes)
    return base64.b64encode(data).decode("ascii")


async def _write_package(folder: str, name: str, data: bytes) -> Path:
    target = Path(folder)
    await asyncio.to_thread(target.mkdir, parents=True, exist_ok=True)
    out = target / f"{name}.zip"
    await asyncio.to_thread(out.write_bytes, data)
    return out


class PlatformsService(VaultService):
    SERVICE_NAME = "pcloud-platforms"

    # --- platforms ------------------------------------------------------------

    async def _list(self, query: dict[str, str]) -> list[Platform]:
        r = await self._rest.get(PLATFORMS_PATH, params=query or None)
        payload = self._snake_json(r, 200, operation="list platforms")
        items = extract_items(payload, ("platforms",))
        if items is None:
            raise ApiError("list platforms", r.status_code, "unexpected result")
        return [_platform(p) for p in items]

    async def list_platforms(self) -> list[Platform]:
        log.info("list_platforms")
        return await self._list({})

    async def list_platforms_by(self, platforms_filter: PlatformsFilter) -> list[Platform]:
        log.info("list_platforms_by", filter=platforms_filter.model_dump(exclude_none=True))
        query: dict[str, str] = {}
        if platforms_filter.active:
            query["Active"] = "true"
        if platforms_filter.platform_type:
            query["PlatformType"] = platforms_filter.platform_type
        if platforms_filter.platform_name:
            query["Search"] = platforms_filter.platform_name
        return await self._list(query)

    async def platform(self, platform_id: str) -> PlatformDetails:
        log.info("get_platform", platform_id=platform_id)
        r = await self._rest.get(f"{PLATFORMS_PATH}/{platform_id}")
        return PlatformDetails.model_validate(self._snake_json(r, 200, operation="retrieve platform"))

    async def platforms_stats(self) -> PlatformsStats:
        log.info("platforms_stats")
        platforms = await self.list_platforms()
        return PlatformsStats(
            platforms_count=len(platforms),
            platforms_count_by_type=dict(Counter(p.general.platform_type for p in platforms)),
        )

    async def _import(self, package_path: str, operation: str) -> str:
        encoded = await _read_package(package_path)
        log.info(operation.replace(" ", "_"), package_path=package_path)
        r = await self._rest.post(f"{PLATFORMS_PATH}/import", json={"ImportFile": encoded})
        data = self._snake_json(r, 201, operation=operation)
        platform_id = data.get("platform_id") if isinstance(data, dict) else None
        if not isinstance(platform_id, str) or not platform_id:
            raise ApiError(operation, r.status_code, "platform id missing from import response")
        return platform_id

    async def import_platform(self, package_path: str) -> PlatformDetails:
        return await self.platform(await self._import(package_path, "import platform"))

    async def import_target_platform(self, package_path: str) -> TargetPlatform:
        platform_id = await self._import(package_path, "import target platform")
        found = await self.list_target_platforms_by(TargetPlatformsFilter(platform_id=platform_id))
        if not found:
            raise ApiError("import target platform", 201, f"target platform {platform_id} not found after import")
        return found[0]

    async def export_platform(self, platform_id: str, output_folder: str) -> Path:
        log.info("export_platform", platform_id=platform_id, output_folder=output_folder)
        r = await self._rest.post(f"{PLATFORMS_PATH}/{platform_id}/export")
        expect(r, 200, operation="export platform")
        return await _write_package(output_folder, platform_id, r.content)

    # --- target platforms ----------------------------------------------------

    async def _list_targets(self, targets_filter: TargetPlatformsFilter) -> list[TargetPlatform]:
        clauses = [c for flag, c in _TARGET_FLAG_CLAUSES.items() if getattr(targets_filter, flag)]
        if targets_filter.system_type:
            clauses.insert(1 if targets_filter.active else 0, f"systemType eq {targets_filter.system_type}")
        query = {"filter": " AND ".join(clauses)} if clauses else None
        r = await self._rest.get(TARGET_PLATFORMS_PATH, params=query)
        payload = self._snake_json(r, 200, operation="list target platforms")
        items = extract_items(payload, ("platforms",))
        if items is None:
            raise ApiError("list target platforms", r.status_code, "unexpected result")
        return [TargetPlatform.model_validate(p) for p in items]

    async def list_target_platforms(self) -> list[TargetPlatform]:
        log.info("list_target_platforms")
        return await self._list_targets(TargetPlatformsFilter())

    async def list_target_platforms_by(self, targets_filter: TargetPlatformsFilter) -> list[TargetPlatform]:
        log.info("list_target_platforms_by", filter=targets_filter.model_dump(exclude_defaults=True))
        return [
            p
            for p in await self._list_targets(targets_filter)
            if _wildcard(targets_filter.platform_id, p.platform_id)
            and _wildcard(targets_filter.name, p.name)
            and (not targets_filter.active or p.active)
        ]

    async def target_platform(self, target_platform_id: int) -> TargetPlatform:
        log.info("get_target_platform", target_platform_id=target_platform_id)
        for p in await self.list_target_platforms():
            if p.id == target_platform_id:
                return p
        raise InvalidRequestError(f"no target platform with id {target_platform_id}")

    async def activate_target_platform(self, target_platform_id: int) -> None:
        log.info("activate_target_platform", target_platform_id=target_platform_id)
        r = await self._rest.post(f"{TARGET_PLATFORMS_PATH}/{target_platform_id}/activate")
        expect(r, 200, operation="activate target platform")

    async def deactivate_target_platform(self, target_platform_id: int) -> None:
        log.info("deactivate_target_platform", target_platform_id=target_platform_id)
        r = await self._rest.post(f"{TARGET_PLATFORMS_PATH}/{target_platform_id}/deactivate")
        expect(r, 200, operation="deactivate target platform")

    async def duplicate_target_platform(
        self, duplicate: DuplicateTargetPlatform
    ) -> DuplicatedTargetPlatformInfo:
        log.info("duplicate_target_platform", target_platform_id=duplicate.target_platform_id, name=duplicate.name)
        r = await self._rest.post(
            f"{TARGET_PLATFORMS_PATH}/{duplicate.target_platform_id}",
            json=duplicate.body(exclude={"target_platform_id"}),
        )
        return DuplicatedTargetPlatformInfo.model_validate(
            self._snake_json(r, 200, operation="duplicate target platform")
        )

    async def delete_target_platform(self, target_platform_id: int) -> None:
        log.info("delete_target_platform", target_platform_id=target_platform_id)
        r = await self._rest.delete(f"{TARGET_PLATFORMS_PATH}/{target_platform_id}")
        expect(r, 204, operation="delete target platform")

    async def export_target_platform(self, target_platform_id: int, output_folder: str) -> Path:
        target = await self.target_platform(target_platform_id)
        log.info("export_target_platform", target_platform_id=target_platform_id, output_folder=output_folder)
        r = await self._rest.post(f"{TARGET_PLATFORMS_PATH}/{target_platform_id}/export")
        expect(r, 200, operation="export target platform")
        return await _write_package(output_folder, target.platform_id, r.content)

    async def target_platforms_stats(self) -> TargetPlatformsStats:
        log.info("target_platforms_stats")
        targets = await self.list_target_platforms()
        return TargetPlatformsStats(
            target_platforms_count=len(targets),
            active_target_platforms_count=sum(1 for t in targets if t.active),
            target_platforms_count_by_system_type=dict(Counter(t.system_type for t in targets)),
        )


# --- Module Notes -----------------------------------------------------------
# Target platform lookups by id scan the full listing; the vault has no single-item endpoint.
# Platform packages travel base64-encoded under `ImportFile`; exports are raw zip bytes.
