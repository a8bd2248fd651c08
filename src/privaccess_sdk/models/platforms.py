"""
privaccess_sdk.models.platforms

Vault platform models.
"""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from privaccess_sdk.models.base import PlatformModel, RequestModel


class PlatformGeneralDetails(PlatformModel):
    id: str = ""
    name: str = ""
    system_type: str = ""
    active: bool = False
    description: str = ""
    platform_base_id: str = ""
    platform_type: str = ""


class PlatformProperty(PlatformModel):
    name: str = ""
    display_name: str = ""


class PlatformProperties(PlatformModel):
    required: list[PlatformProperty] = Field(default_factory=list)
    optional: list[PlatformProperty] = Field(default_factory=list)


class CredentialsManagement(PlatformModel):
    allowed_safes: str = ""
    allow_manual_change: bool = False
    perform_periodic_change: bool = False
    require_password_change_every_x_days: int = 0
    allow_manual_verification: bool = False
    perform_periodic_verification: bool = False
    require_password_verification_every_x_days: int = 0
    allow_manual_reconciliation: bool = False
    automatic_reconcile_when_unsynched: bool = False


class SessionManagement(PlatformModel):
    require_privileged_session_monitoring_and_isolation: bool = False
    record_and_save_session_activity: bool = False
    psm_server_id: str = ""


class PrivilegedAccessWorkflows(PlatformModel):
    require_dual_control_password_access_approval: bool = False
    enforce_checkin_checkout_exclusive_access: bool = False
    enforce_onetime_password_access: bool = False


class Platform(PlatformModel):
    general: PlatformGeneralDetails = Field(default_factory=PlatformGeneralDetails)
    properties: PlatformProperties = Field(default_factory=PlatformProperties)
    linked_accounts: list[PlatformProperty] = Field(default_factory=list)
    credentials_management: CredentialsManagement = Field(default_factory=CredentialsManagement)
    session_management: SessionManagement = Field(default_factory=SessionManagement)
    privileged_access_workflows: PrivilegedAccessWorkflows = Field(
        default_factory=PrivilegedAccessWorkflows
    )


class PlatformDetails(PlatformModel):
    # Details responses vary per platform policy; unknown sections are kept as-is.
    model_config = ConfigDict(extra="allow")

    platform_id: str = ""
    name: str = ""
    details: dict[str, Any] = Field(default_factory=dict)


class PlatformsFilter(RequestModel):
    active: bool = False
    platform_type: str | None = None
    platform_name: str | None = None


class PlatformsStats(PlatformModel):
    platforms_count: int = 0
    platforms_count_by_type: dict[str, int] = Field(default_factory=dict)


class ActiveException(PlatformModel):
    is_active: bool = False
    is_an_exception: bool = False


class TargetPlatformWorkflows(PlatformModel):
    require_dual_control_password_access_approval: ActiveException = Field(default_factory=ActiveException)
    enforce_checkin_checkout_exclusive_access: ActiveException = Field(default_factory=ActiveException)
    enforce_onetime_password_access: ActiveException = Field(default_factory=ActiveException)
    require_users_to_specify_reason_for_access: ActiveException = Field(default_factory=ActiveException)


class VerificationChangePolicy(PlatformModel):
    perform_automatic: bool = False
    require_password_every_x_days: int = 0
    auto_on_add: bool = False
    is_require_password_every_x_days_an_exception: bool = False
    allow_manual: bool = False


class ReconcilePolicy(PlatformModel):
    automatic_reconcile_when_unsynced: bool = False
    allow_manual: bool = False


class SecretUpdateConfiguration(PlatformModel):
    change_password_in_reset_mode: bool = False


class CredentialsManagementPolicy(PlatformModel):
    verification: VerificationChangePolicy = Field(default_factory=VerificationChangePolicy)
    change: VerificationChangePolicy = Field(default_factory=VerificationChangePolicy)
    reconcile: ReconcilePolicy = Field(default_factory=ReconcilePolicy)
    secret_update_configuration: SecretUpdateConfiguration = Field(default_factory=SecretUpdateConfiguration)


class PrivilegedSessionManagement(PlatformModel):
    psm_server_id: str = ""
    psm_server_name: str = ""


class TargetPlatform(PlatformModel):
    id: int
    platform_id: str = ""
    name: str = ""
    active: bool = False
    system_type: str = ""
    allowed_safes: str = ""
    privileged_access_workflows: TargetPlatformWorkflows | None = None
    credentials_management_policy: CredentialsManagementPolicy | None = None
    privileged_session_management: PrivilegedSessionManagement | None = None


class TargetPlatformsFilter(RequestModel):
    # Case-insensitive shell-style wildcards.
    name: str | None = None
    platform_id: str | None = None
    active: bool = False
    system_type: str | None = None
    periodic_verify: bool = False
    manual_verify: bool = False
    periodic_change: bool = False
    manual_change: bool = False
    automatic_reconcile: bool = False
    manual_reconcile: bool = False


class DuplicateTargetPlatform(RequestModel):
    target_platform_id: int
    name: str
    description: str | None = None


class DuplicatedTargetPlatformInfo(PlatformModel):
    id: int
    platform_id: str = ""
    name: str = ""
    description: str = ""


class TargetPlatformsStats(PlatformModel):
    target_platforms_count: int = 0
    active_target_platforms_count: int = 0
    target_platforms_count_by_system_type: dict[str, int] = Field(default_factory=dict)
