"""
privaccess_sdk.models.accounts

Vault account models.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import Field

from privaccess_sdk.models.base import PlatformModel, RequestModel


class SecretType(enum.StrEnum):
    password = "password"
    key = "key"


class AccountSecretManagement(PlatformModel):
    automatic_management_enabled: bool = False
    manual_management_reason: str | None = None
    last_modified_time: int | None = None


class AccountRemoteMachinesAccess(PlatformModel):
    remote_machines: list[str] = Field(default_factory=list)
    access_restricted_to_remote_machines: bool = False


class Account(PlatformModel):
    account_id: str
    name: str = ""
    safe_name: str = ""
    status: str | None = None
    created_time: int | None = None
    category_modification_time: int | None = None
    platform_id: str = ""
    username: str | None = None
    address: str | None = None
    secret_type: SecretType | None = None
    platform_account_properties: dict[str, Any] = Field(default_factory=dict)
    secret_management: AccountSecretManagement = Field(default_factory=AccountSecretManagement)
    remote_machines_access: AccountRemoteMachinesAccess = Field(
        default_factory=AccountRemoteMachinesAccess
    )


class AccountCredentials(PlatformModel):
    account_id: str
    password: str = Field(repr=False)


class AccountsFilter(RequestModel):
    search: str | None = None
    search_type: str | None = None
    sort: str | None = None
    offset: int | None = None
    limit: int | None = None
    safe_name: str | None = None


class _AccountWrite(RequestModel):
    name: str | None = None
    address: str | None = None
    username: str | None = None
    platform_id: str | None = None
    platform_account_properties: dict[str, Any] | None = None
    # Flattened here, nested under secretManagement/remoteMachinesAccess on the wire.
    automatic_management_enabled: bool = False
    manual_management_reason: str | None = None
    last_modified_time: int | None = None
    remote_machines: list[str] | None = None
    access_restricted_to_remote_machines: bool = False

    def nested_body(self, *, exclude: set[str]) -> dict[str, Any]:
        flattened = {
            "automatic_management_enabled",
            "manual_management_reason",
            "last_modified_time",
            "remote_machines",
            "access_restricted_to_remote_machines",
        }
        body = self.body(exclude=exclude | flattened)
        if self.automatic_management_enabled:
            mgmt: dict[str, Any] = {"automaticManagementEnabled": True}
            if self.manual_management_reason:
                mgmt["manualManagementReason"] = self.manual_management_reason
            if self.last_modified_time:
                mgmt["lastModifiedTime"] = self.last_modified_time
            body["secretManagement"] = mgmt
        if self.remote_machines is not None:
            access: dict[str, Any] = {"remoteMachines": self.remote_machines}
            if self.access_restricted_to_remote_machines:
                access["accessRestrictedToRemoteMachines"] = True
            body["remoteMachinesAccess"] = access
        return body


class AddAccount(_AccountWrite):
    secret: str = Field(repr=False)
    safe_name: str
    secret_type: SecretType | None = None


class UpdateAccount(_AccountWrite):
    account_id: str
    secret: str | None = Field(default=None, repr=False)


class GetAccountCredentials(RequestModel):
    account_id: str
    reason: str | None = None
    ticketing_system_name: str | None = None
    ticket_id: str | None = None
    version: str | None = None
    action_type: str = "show"
    machine: str | None = None


class AccountsStats(PlatformModel):
    accounts_count: int = 0
    accounts_count_by_platform_id: dict[str, int] = Field(default_factory=dict)
    accounts_count_by_safe_name: dict[str, int] = Field(default_factory=dict)


class AccountSecretVersion(PlatformModel):
    version_id: int | None = None
    is_temporary: bool = False
    modification_date: int | None = None
    modified_by: str | None = None


class SetAccountNextCredentials(RequestModel):
    account_id: str
    new_credentials: str = Field(repr=False)
    change_immediately: bool = False


class LinkAccount(RequestModel):
    account_id: str
    safe: str
    # Which linked slot to fill: 1 = logon account, 2 = enable account, 3 = reconcile account.
    extra_password_index: int
    name: str
    folder: str = "Root"


class UnlinkAccount(RequestModel):
    account_id: str
    extra_password_index: int
