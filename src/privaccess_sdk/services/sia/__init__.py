"""Secure infrastructure access services: certificates, database secrets and targets."""

from privaccess_sdk.services.sia.certificates import CertificatesService
from privaccess_sdk.services.sia.secrets_db import DBSecretsService
from privaccess_sdk.services.sia.workspaces_db import DBWorkspaceService

__all__ = ["CertificatesService", "DBSecretsService", "DBWorkspaceService"]
