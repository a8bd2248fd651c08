"""
privaccess_sdk.models.safes

Safe and safe member models.
"""

from __future__ import annotations

import enum

from pydantic import Field

from privaccess_sdk.models.base import PlatformModel, RequestModel
from privaccess_sdk.permissions import PermissionTier, SafeMemberPermissions


class MemberType(enum.StrEnum):
    user = "User"
    group = "Group"
    role = "Role"


class SafeCreator(PlatformModel):
    id: str = ""
    name: str = ""


class Safe(PlatformModel):
    safe_id: str
    safe_name: str = ""
    description: str | None = None
    location: str = ""
    number_of_days_retention: int | None = None
    number_of_versions_retention: int | None = None
    auto_purge_enabled: bool = False
    olac_enabled: bool = False
    managing_cpm: str | None = None
    creator: SafeCreator = Field(default_factory=SafeCreator)
    creation_time: int | None = None
    last_modification_time: int | None = None
    safe_number: int | None = None
    is_expired_member: bool = False


class SafeMember(PlatformModel):
    safe_id: str = ""
    safe_name: str = ""
    safe_number: int | None = None
    member_id: str | int | None = None
    member_name: str
    member_type: str = ""
    membership_expiration_date: int | None = None
    is_expired_membership_enabled: bool = False
    is_predefined_user: bool = False
    is_read_only: bool = False
    permissions: SafeMemberPermissions = Field(default_factory=SafeMemberPermissions)
    permission_set: PermissionTier = PermissionTier.custom


class SafesFilter(RequestModel):
    search: str | None = None
    sort: str | None = None
    offset: int | None = None
    limit: int | None = None


class SafeMembersFilter(RequestModel):
    safe_id: str
    search: str | None = None
    sort: str | None = None
    offset: int | None = None
    limit: int | None = None
    member_type: MemberType | None = None


class AddSafe(RequestModel):
    safe_name: str
    description: str | None = None
    location: str | None = None
    number_of_days_retention: int | None = None
    number_of_versions_retention: int | None = None
    auto_purge_enabled: bool | None = None
    olac_enabled: bool = False
    managing_cpm: str = ""


class UpdateSafe(RequestModel):
    safe_id: str
    safe_name: str | None = None
    description: str | None = None
    location: str | None = None
    number_of_days_retention: int | None = None
    number_of_versions_retention: int | None = None
    auto_purge_enabled: bool | None = None
    olac_enabled: bool | None = None
    managing_cpm: str | None = None


class AddSafeMember(RequestModel):
    safe_id: str
    member_name: str
    member_type: MemberType
    search_in: str | None = None
    membership_expiration_date: int | None = None
    permissions: SafeMemberPermissions | None = None
    permission_set: PermissionTier | str | None = None


class UpdateSafeMember(RequestModel):
    safe_id: str
    member_name: str
    membership_expiration_date: int | None = None
    permissions: SafeMemberPermissions | None = None
    permission_set: PermissionTier | str | None = None


class SafesStats(PlatformModel):
    safes_count: int = 0
    safes_count_by_location: dict[str, int] = Field(default_factory=dict)
    safes_count_by_creator: dict[str, int] = Field(default_factory=dict)


class SafeMembersStats(PlatformModel):
    safe_members_count: int = 0
    safe_members_permission_sets: dict[str, int] = Field(default_factory=dict)
    safe_members_types_count: dict[str, int] = Field(default_factory=dict)


class SafesMembersStats(PlatformModel):
    safe_members_stats: dict[str, SafeMembersStats] = Field(default_factory=dict)
