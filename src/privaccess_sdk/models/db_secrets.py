"""
privaccess_sdk.models.db_secrets

Database strong accounts and legacy database secret models.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import Field

from privaccess_sdk.models.base import PlatformModel, RequestModel

STRONG_ACCOUNTS_MIN_LIMIT = 1
STRONG_ACCOUNTS_MAX_LIMIT = 1000


class StoreType(enum.StrEnum):
    pam = "pam"
    managed = "managed"


class StrongAccount(PlatformModel):
    id: str
    name: str = ""
    store_type: StoreType
    modified_at: str | None = None
    created_at: str | None = None
    created_by: str | None = None
    modified_by: str | None = None

    # pam store
    safe: str | None = None
    account_name: str | None = None

    # managed store
    platform: str | None = None
    address: str | None = None
    username: str | None = None
    port: int | None = None
    database: str | None = None
    dsn: str | None = None
    aws_access_key_id: str | None = None
    aws_account_id: str | None = None
    auth_database: str | None = None

    @property
    def strong_account_id(self) -> str:
        return self.id


class SecretStore(PlatformModel):
    store_id: str | None = None
    store_type: str = ""


class SecretMetadata(PlatformModel):
    secret_id: str
    secret_name: str = ""
    description: str | None = None
    purpose: str | None = None
    secret_type: str = ""
    secret_store: SecretStore = Field(default_factory=SecretStore)
    secret_link: dict[str, Any] = Field(default_factory=dict)
    secret_exposed_data: dict[str, Any] = Field(default_factory=dict)
    tags: dict[str, str] = Field(default_factory=dict)
    created_by: str = ""
    creation_time: str = ""
    last_updated_by: str = ""
    last_update_time: str = ""
    is_active: bool = False


class SecretMetadataList(PlatformModel):
    total_count: int = 0
    secrets: list[SecretMetadata] = Field(default_factory=list)


class SecretsFilter(RequestModel):
    secret_type: str | None = None
    tags: dict[str, str] | None = None
    store_type: str | None = None
    # Regular expression matched against the secret name.
    secret_name: str | None = None
    is_active: bool = False


class SecretsStats(PlatformModel):
    secrets_count: int = 0
    active_secrets_count: int = 0
    inactive_secrets_count: int = 0
    secrets_count_by_secret_type: dict[str, int] = Field(default_factory=dict)
    secrets_count_by_store_type: dict[str, int] = Field(default_factory=dict)


class SecretType(enum.StrEnum):
    username_password = "username_password"
    iam_user = "iam_user"
    cyberark_pam = "cyberark_pam"
    atlas_access_keys = "atlas_access_keys"


SECRET_TYPE_STORE: dict[str, StoreType] = {
    SecretType.username_password: StoreType.managed,
    SecretType.iam_user: StoreType.managed,
    SecretType.atlas_access_keys: StoreType.managed,
    SecretType.cyberark_pam: StoreType.pam,
}

# Managed strong accounts carry different properties per database platform.
PLATFORM_REQUIRED_PROPERTIES: dict[str, tuple[str, ...]] = {
    "PostgreSQL": ("username",),
    "MySQL": ("username",),
    "MariaDB": ("username",),
    "MSSql": ("username",),
    "Oracle": ("username",),
    "MongoDB": ("username", "address", "database"),
    "DB2UnixSSH": ("username", "address"),
    "WinDomain": ("username", "address"),
    "AWSAccessKeys": ("username", "aws_access_key_id", "aws_account_id"),
}

PLATFORM_OPTIONAL_PROPERTIES: dict[str, tuple[str, ...]] = {
    "PostgreSQL": ("port", "database", "dsn", "address"),
    "MySQL": ("port", "database", "dsn", "address"),
    "MariaDB": ("port", "database", "dsn", "address"),
    "MSSql": ("port", "database", "dsn", "address", "reconcile_is_win_account"),
    "Oracle": ("port", "database", "dsn", "address"),
    "MongoDB": ("port", "auth_database", "dsn", "replica_set", "use_ssl"),
}

PAM_REQUIRED_PROPERTIES = ("safe", "account_name")


def password_field(platform: str) -> str:
    return "secret_access_key" if platform == "AWSAccessKeys" else "password"


class StrongAccountRequest(RequestModel):
    store_type: StoreType
    name: str | None = None

    # pam store
    safe: str | None = None
    account_name: str | None = None

    # managed store
    platform: str | None = None
    address: str | None = None
    username: str | None = None
    port: int | None = None
    database: str | None = None
    dsn: str | None = None
    aws_access_key_id: str | None = None
    aws_account_id: str | None = None
    auth_database: str | None = None
    replica_set: str | None = None
    use_ssl: bool | None = None
    reconcile_is_win_account: bool | None = None

    password: str | None = None
    secret_access_key: str | None = None


class AddStrongAccount(StrongAccountRequest):
    name: str


class UpdateStrongAccount(StrongAccountRequest):
    strong_account_id: str


class SecretDataRequest(RequestModel):
    description: str | None = None
    purpose: str | None = None
    tags: dict[str, str] | None = None

    username: str | None = None
    password: str | None = None

    pam_safe: str | None = None
    pam_account_name: str | None = None

    iam_account: str | None = None
    iam_username: str | None = None
    iam_access_key_id: str | None = None
    iam_secret_access_key: str | None = None

    atlas_public_key: str | None = None
    atlas_private_key: str | None = None


class AddSecret(SecretDataRequest):
    secret_name: str
    secret_type: SecretType
    # Deduced from the secret type when omitted.
    store_type: StoreType | None = None


class UpdateSecret(SecretDataRequest):
    secret_id: str | None = None
    # Used to look the secret up when no id is given.
    secret_name: str | None = None
    new_secret_name: str | None = None
