"""Mapping between :class:`Partner` rows and directory records."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ocpi_hub.models.enums import ImageCategory, RoleType
from ocpi_hub.models.partner import Partner
from ocpi_hub.services.credentials.dto import (
    BusinessDetails,
    CredentialRole,
    Image,
    PartnerCredentials,
    PartnerRecord,
)


def role_to_document(role: CredentialRole) -> dict[str, Any]:
    """Serialize a role to the JSON document stored in ``partners.roles``."""
    doc: dict[str, Any] = {
        "role": RoleType(role.role).value,
        "party_id": role.party_id,
        "country_code": role.country_code,
    }
    details = role.business_details
    if details is not None:
        details_doc: dict[str, Any] = {"name": details.name}
        if details.website is not None:
            details_doc["website"] = details.website
        if details.logo is not None:
            logo = details.logo
            details_doc["logo"] = {
                "url": logo.url,
                "thumbnail": logo.thumbnail,
                "category": ImageCategory(logo.category).value,
                "type": logo.type,
                "width": logo.width,
                "height": logo.height,
            }
        doc["business_details"] = details_doc
    return doc


def role_from_document(doc: Mapping[str, Any]) -> CredentialRole:
    details_doc = doc.get("business_details")
    details = None
    if details_doc:
        logo_doc = details_doc.get("logo")
        logo = None
        if logo_doc:
            logo = Image(
                url=logo_doc["url"],
                thumbnail=logo_doc.get("thumbnail"),
                category=ImageCategory(logo_doc.get("category", ImageCategory.OPERATOR.value)),
                type=logo_doc.get("type", ""),
                width=logo_doc.get("width"),
                height=logo_doc.get("height"),
            )
        details = BusinessDetails(
            name=details_doc.get("name", ""),
            website=details_doc.get("website"),
            logo=logo,
        )
    return CredentialRole(
        role=RoleType(doc["role"]),
        party_id=doc["party_id"],
        country_code=doc["country_code"],
        business_details=details,
    )


def roles_to_documents(roles: Iterable[CredentialRole]) -> list[dict[str, Any]]:
    return [role_to_document(role) for role in roles]


def to_record(row: Partner) -> PartnerRecord:
    """Copy an ORM row into an immutable :class:`PartnerRecord`."""
    return PartnerRecord(
        id=row.id,
        partner_id=row.partner_id,
        name=row.name,
        type=row.type,
        status=row.status,
        token=row.token,
        credentials=PartnerCredentials(
            token=row.credentials_token,
            url=row.credentials_url,
            roles=tuple(role_from_document(doc) for doc in row.roles or ()),
            version=row.credentials_version,
            version_url=row.credentials_version_url,
        ),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def mutable_fields(record: PartnerRecord) -> dict[str, Any]:
    """Fields a full-document update rewrites (identity and type excluded)."""
    credentials = record.credentials
    return {
        "name": record.name,
        "status": record.status,
        "token": record.token,
        "credentials_token": credentials.token,
        "credentials_url": credentials.url,
        "credentials_version": credentials.version,
        "credentials_version_url": credentials.version_url,
        "roles": roles_to_documents(credentials.roles),
    }


def to_row(record: PartnerRecord) -> Partner:
    """Build a transient ORM row for insertion."""
    return Partner(partner_id=record.partner_id, type=record.type, **mutable_fields(record))
