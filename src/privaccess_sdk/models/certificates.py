"""
privaccess_sdk.models.certificates

Connection certificate models.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from privaccess_sdk.models.base import PlatformModel, RequestModel


class CertificateMetadata(PlatformModel):
    issuer: str = ""
    subject: str = ""
    valid_from: str = ""
    valid_to: str = ""
    serial_number: str = ""


class Certificate(PlatformModel):
    certificate_id: str
    tenant_id: str = ""
    domain_name: str | None = None
    cert_body: str = ""
    cert_name: str | None = None
    cert_description: str | None = None
    expiration_date: str = ""
    created_by: str | None = None
    last_updated_by: str | None = None
    checksum: str = ""
    version: int = 0
    metadata: CertificateMetadata = Field(default_factory=CertificateMetadata)
    updated_time: str = ""
    labels: dict[str, Any] = Field(default_factory=dict)


class ShortCertificate(PlatformModel):
    certificate_id: str
    body: str = ""
    domain: str | None = None
    cert_name: str | None = None
    cert_description: str | None = None
    metadata: CertificateMetadata = Field(default_factory=CertificateMetadata)
    labels: dict[str, Any] = Field(default_factory=dict)


class _CertificateWrite(RequestModel):
    cert_type: str | None = None
    cert_password: str | None = Field(default=None, repr=False)
    cert_name: str | None = None
    cert_description: str | None = None
    domain_name: str | None = None
    certificate_body: str | None = None
    # Path to a PEM/DER file read when no body is given.
    file: str | None = None
    labels: dict[str, Any] | None = None


class AddCertificate(_CertificateWrite):
    pass


class UpdateCertificate(_CertificateWrite):
    certificate_id: str


class CertificatesFilter(RequestModel):
    domain_name: str | None = None
    cert_name: str | None = None


class CertificatesStats(PlatformModel):
    certificates_count: int = 0
