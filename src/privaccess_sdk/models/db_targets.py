"""
privaccess_sdk.models.db_targets

Database target (workspace) models.
"""

from __future__ import annotations

import enum

from pydantic import Field

from privaccess_sdk.models.base import PlatformModel, RequestModel

DATABASE_ENGINE_TYPES: frozenset[str] = frozenset(
    {
        "aurora-postgresql", "aurora-mysql", "custom-sqlserver-ee", "custom-sqlserver-se",
        "custom-sqlserver-web", "oracle-ee", "oracle-ee-cdb", "oracle-se2", "oracle-se2-cdb",
        "sqlserver", "oracle", "mssql", "mariadb", "mysql", "postgres", "sqlserver-sh",
        "mssql-sh", "mysql-sh", "mariadb-sh", "postgres-sh", "oracle-sh", "db2", "db2-sh",
        "mongo", "mongo-sh", "mssql-sh-vm", "mssql-azure-managed", "mssql-azure-vm",
    }
)


class DatabaseWarning(enum.StrEnum):
    no_certificates = "no_certificates"
    no_secrets = "no_secrets"
    any_error = "any_error"


class DatabaseTargetInfo(PlatformModel):
    id: str
    name: str = ""
    enable_certificate_validation: bool = False
    certificate: str | None = None
    services: list[str] = Field(default_factory=list)
    secret_id: str | None = None
    platform: str | None = None
    provider_engine: str = ""
    configured_auth_method_type: str | None = None


class DatabaseTargetInfoList(PlatformModel):
    items: list[DatabaseTargetInfo] = Field(default_factory=list)
    total_count: int = 0


class DatabaseTargetsFilter(RequestModel):
    # Regular expression matched against the target name.
    name: str | None = None
    provider_family: str | None = None
    provider_engine: str | None = None
    auth_methods: list[str] | None = None
    db_warnings_filter: DatabaseWarning | None = None
    limit: int | None = None
    offset: int | None = None


class DatabaseTargetsStats(PlatformModel):
    databases_count: int = 0
    databases_without_secret_count: int = 0
    databases_without_certificates_count: int = 0
    databases_count_by_engine: dict[str, int] = Field(default_factory=dict)
    databases_count_by_workspace: dict[str, int] = Field(default_factory=dict)
    databases_count_by_auth_method: dict[str, int] = Field(default_factory=dict)
    databases_count_by_warning: dict[str, int] = Field(default_factory=dict)


DATABASE_FAMILY_DEFAULT_PORTS: dict[str, int] = {
    "Postgres": 5432,
    "Oracle": 2484,
    "MSSQL": 1433,
    "MySQL": 3306,
    "MariaDB": 3306,
    "DB2": 50002,
    "Mongo": 27017,
}

# Engine name prefix -> family, longest prefix first.
_ENGINE_FAMILY_PREFIXES: tuple[tuple[str, str], ...] = (
    ("aurora-postgresql", "Postgres"),
    ("aurora-mysql", "MySQL"),
    ("custom-sqlserver", "MSSQL"),
    ("sqlserver", "MSSQL"),
    ("mssql", "MSSQL"),
    ("oracle", "Oracle"),
    ("mariadb", "MariaDB"),
    ("mysql", "MySQL"),
    ("postgres", "Postgres"),
    ("db2", "DB2"),
    ("mongo", "Mongo"),
)


def engine_family(engine: str) -> str | None:
    for prefix, family in _ENGINE_FAMILY_PREFIXES:
        if engine.startswith(prefix):
            return family
    return None


class DatabaseTargetRequest(RequestModel):
    platform: str | None = None
    region: str | None = None
    auth_database: str | None = None
    services: list[str] | None = None
    domain: str | None = None
    domain_controller_name: str | None = None
    domain_controller_netbios: str | None = None
    domain_controller_use_ldaps: bool | None = None
    domain_controller_enable_certificate_validation: bool | None = None
    domain_controller_ldaps_certificate: str | None = None
    account: str | None = None
    provider_engine: str | None = None
    enable_certificate_validation: bool | None = None
    certificate: str | None = None
    read_write_endpoint: str | None = None
    read_only_endpoint: str | None = None
    port: int | None = None
    secret_id: str | None = None
    configured_auth_method_type: str | None = None


class AddDatabaseTarget(DatabaseTargetRequest):
    name: str
    provider_engine: str
    platform: str | None = "ON-PREMISE"
    auth_database: str | None = "admin"
    domain_controller_use_ldaps: bool | None = False
    domain_controller_enable_certificate_validation: bool | None = True
    enable_certificate_validation: bool | None = True


class UpdateDatabaseTarget(DatabaseTargetRequest):
    id: str | None = None
    # Used to look the target up when no id is given.
    name: str | None = None
    new_name: str | None = None
