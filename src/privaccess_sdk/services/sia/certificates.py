"""
privaccess_sdk.services.sia.certificates

Connection certificates service.

Responsibilities:
- Upload certificates from a PEM/DER body or a local file.
- Read, update (merge with the stored certificate) and delete certificates.
- List certificates, optionally filtered client-side by domain or name.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from privaccess_sdk.clients.rest import expect
from privaccess_sdk.errors import ApiError, InvalidRequestError
from privaccess_sdk.models.certificates import (
    AddCertificate,
    Certificate,
    CertificatesFilter,
    CertificatesStats,
    ShortCertificate,
    UpdateCertificate,
)
from privaccess_sdk.observability.logging import get_logger
from privaccess_sdk.paging import extract_items
from privaccess_sdk.services.sia.base import SiaService

log = get_logger(__name__)

CERTIFICATES_PATH = "api/certificates"


class CertificatesService(SiaService):
    SERVICE_NAME = "sia-certificates"

    async def certificate(self, certificate_id: str) -> Certificate:
        log.info("get_certificate", certificate_id=certificate_id)
        r = await self._rest.get(f"{CERTIFICATES_PATH}/{certificate_id}")
        return Certificate.model_validate(self._snake_json(r, 200, operation="get certificate"))

    async def add_certificate(self, add_certificate: AddCertificate) -> Certificate:
        log.info("add_certificate", cert_name=add_certificate.cert_name)
        body = add_certificate.body(exclude={"certificate_body", "file"}, camel=False)
        labels: dict[str, Any] = dict(add_certificate.labels or {})
        labels["origin"] = self._settings.service_name
        if add_certificate.certificate_body:
            cert_body = add_certificate.certificate_body
        elif add_certificate.file:
            path = Path(add_certificate.file)
            cert_body = await asyncio.to_thread(path.read_text)
            body.setdefault("cert_name", path.name)
            body.setdefault("cert_description", f"Certificate imported from file {path.name}")
            labels["file_name"] = path.name
        else:
            raise InvalidRequestError("either certificate_body or file must be provided")
        if not cert_body:
            raise InvalidRequestError("certificate body cannot be empty")
        body["labels"] = labels
        body["cert_body"] = cert_body

        r = await self._rest.post(CERTIFICATES_PATH, json=body)
        created = self._snake_json(r, 201, operation="add certificate")
        certificate_id = created.get("certificate_id") if isinstance(created, dict) else None
        if not certificate_id:
            raise ApiError("add certificate", r.status_code, "certificate_id not found in response")
        return await self.certificate(str(certificate_id))

    async def update_certificate(self, update_certificate: UpdateCertificate) -> Certificate:
        log.info("update_certificate", certificate_id=update_certificate.certificate_id)
        body = update_certificate.body(
            exclude={"certificate_body", "file", "certificate_id"}, camel=False
        )
        if update_certificate.certificate_body:
            body["cert_body"] = update_certificate.certificate_body
        elif update_certificate.file:
            body["cert_body"] = await asyncio.to_thread(Path(update_certificate.file).read_text)

        # The platform replaces the whole record; unset fields keep their stored values.
        existing = await self.certificate(update_certificate.certificate_id)
        for k, v in existing.model_dump(mode="json", exclude={"certificate_id"}).items():
            body.setdefault(k, v)

        r = await self._rest.put(
            f"{CERTIFICATES_PATH}/{update_certificate.certificate_id}", json=body
        )
        expect(r, 200, operation="update certificate")
        return await self.certificate(update_certificate.certificate_id)

    async def delete_certificate(self, certificate_id: str) -> None:
        log.info("delete_certificate", certificate_id=certificate_id)
        r = await self._rest.delete(f"{CERTIFICATES_PATH}/{certificate_id}")
        expect(r, 204, operation="delete certificate")

    async def list_certificates(self) -> list[ShortCertificate]:
        log.info("list_certificates")
        r = await self._rest.get(CERTIFICATES_PATH)
        payload = self._snake_json(r, 200, operation="list certificates")
        items = extract_items(payload, ("certificates.items",))
        if items is None:
            raise ApiError("list certificates", r.status_code, "invalid certificates format")
        return [ShortCertificate.model_validate(c) for c in items]

    async def list_certificates_by(
        self, certificates_filter: CertificatesFilter | None
    ) -> list[ShortCertificate]:
        log.info("list_certificates_by")
        certificates = await self.list_certificates()
        if certificates_filter is None:
            return certificates
        return [
            c
            for c in certificates
            if (not certificates_filter.domain_name or c.domain == certificates_filter.domain_name)
            and (not certificates_filter.cert_name or c.cert_name == certificates_filter.cert_name)
        ]

    async def certificates_stats(self) -> CertificatesStats:
        log.info("certificates_stats")
        return CertificatesStats(certificates_count=len(await self.list_certificates()))


# --- Module Notes -----------------------------------------------------------
# Local certificate files are read with `asyncio.to_thread`; no disk I/O runs on the event loop.
