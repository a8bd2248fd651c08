"""
privaccess_sdk.permissions

Safe member permission model and the named permission tiers.

Responsibilities:
- Define the 22 boolean capabilities a safe member may hold.
- Map an exact capability set to its named tier (and back).
- Guarantee the canonical tiers are pairwise distinct so classification is unambiguous.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict

from privaccess_sdk.errors import UnknownPermissionTierError


class PermissionTier(enum.StrEnum):
    connect_only = "connect_only"
    read_only = "read_only"
    approver = "approver"
    accounts_manager = "accounts_manager"
    full = "full"
    custom = "custom"


class SafeMemberPermissions(BaseModel):
    """
    Capabilities of a safe member. Equality is field-by-field.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    use_accounts: bool = False
    retrieve_accounts: bool = False
    list_accounts: bool = False
    add_accounts: bool = False
    update_account_content: bool = False
    update_account_properties: bool = False
    initiate_cpm_account_management_operations: bool = False
    specify_next_account_content: bool = False
    rename_accounts: bool = False
    delete_accounts: bool = False
    unlock_accounts: bool = False
    manage_safe: bool = False
    manage_safe_members: bool = False
    backup_safe: bool = False
    view_audit_log: bool = False
    view_safe_members: bool = False
    access_without_confirmation: bool = False
    create_folders: bool = False
    delete_folders: bool = False
    move_accounts_and_folders: bool = False
    requests_authorization_level_1: bool = False
    requests_authorization_level_2: bool = False

    def granted(self) -> frozenset[str]:
        return frozenset(k for k, v in self.model_dump().items() if v)


_CONNECT_ONLY = SafeMemberPermissions(list_accounts=True, use_accounts=True)

_READ_ONLY = _CONNECT_ONLY.model_copy(update={"retrieve_accounts": True})

_APPROVER = SafeMemberPermissions(
    list_accounts=True,
    view_safe_members=True,
    manage_safe_members=True,
    requests_authorization_level_1=True,
)

_ACCOUNTS_MANAGER = SafeMemberPermissions(
    list_accounts=True,
    use_accounts=True,
    retrieve_accounts=True,
    add_accounts=True,
    update_account_properties=True,
    update_account_content=True,
    initiate_cpm_account_management_operations=True,
    specify_next_account_content=True,
    rename_accounts=True,
    delete_accounts=True,
    unlock_accounts=True,
    view_safe_members=True,
    manage_safe_members=True,
    view_audit_log=True,
    access_without_confirmation=True,
)

_FULL = _ACCOUNTS_MANAGER.model_copy(
    update={
        "requests_authorization_level_1": True,
        "manage_safe": True,
        "backup_safe": True,
        "move_accounts_and_folders": True,
        "create_folders": True,
        "delete_folders": True,
    }
)

# Ordered: classification returns the first exact match.
PERMISSION_TIERS: tuple[tuple[PermissionTier, SafeMemberPermissions], ...] = (
    (PermissionTier.connect_only, _CONNECT_ONLY),
    (PermissionTier.read_only, _READ_ONLY),
    (PermissionTier.approver, _APPROVER),
    (PermissionTier.accounts_manager, _ACCOUNTS_MANAGER),
    (PermissionTier.full, _FULL),
)


def _check_distinct(
    table: tuple[tuple[PermissionTier, SafeMemberPermissions], ...],
) -> None:
    seen: dict[frozenset[str], PermissionTier] = {}
    for tier, perms in table:
        granted = perms.granted()
        if granted in seen:
            raise RuntimeError(
                f"permission tiers {seen[granted]} and {tier} share the same capability set"
            )
        seen[granted] = tier


_check_distinct(PERMISSION_TIERS)


def classify(permissions: SafeMemberPermissions) -> PermissionTier:
    for tier, canonical in PERMISSION_TIERS:
        if permissions == canonical:
            return tier
    return PermissionTier.custom


def reverse_lookup(tier: PermissionTier | str) -> SafeMemberPermissions:
    try:
        wanted = PermissionTier(tier)
    except ValueError as e:
        raise UnknownPermissionTierError(str(tier)) from e
    for name, canonical in PERMISSION_TIERS:
        if name == wanted:
            return canonical
    # `custom` has no canonical capability set.
    raise UnknownPermissionTierError(str(wanted))


# --- Module Notes -----------------------------------------------------------
# Classification is exact equality, not "at least": a member holding every `full`
# capability plus requests_authorization_level_2 is `custom`.
