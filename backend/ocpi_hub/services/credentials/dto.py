"""
DTOs for the credentials handshake.

Contracts exchanged between the API layer, the credentials service, and the
partner directory. All DTOs are immutable; services build new instances
instead of mutating the ones they received.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from ocpi_hub.models.enums import ImageCategory, PartnerStatus, PartnerType, RoleType
from ocpi_hub.services._shared.dto import PageMeta

# --------------------------------------------------------------------------- #
# Credentials value objects
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class Image:
    """
    Logo attached to business details.

    :param url: Image URL.
    :type url: str
    :param category: Image category.
    :type category: ImageCategory
    :param type: Image type (e.g. ``png``).
    :type type: str
    :param thumbnail: Optional thumbnail URL.
    :type thumbnail: str | None
    :param width: Optional width in pixels.
    :type width: int | None
    :param height: Optional height in pixels.
    :type height: int | None
    """

    url: str
    category: ImageCategory = ImageCategory.OPERATOR
    type: str = ""
    thumbnail: str | None = None
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True, slots=True)
class BusinessDetails:
    """
    Business information of a party.

    :param name: Business name.
    :type name: str
    :param website: Optional website URL.
    :type website: str | None
    :param logo: Optional logo.
    :type logo: Image | None
    """

    name: str
    website: str | None = None
    logo: Image | None = None


@dataclass(frozen=True, slots=True)
class CredentialRole:
    """
    One role declared in a credentials object.

    :param role: Declared OCPI role.
    :type role: RoleType
    :param party_id: Party identifier (3 characters).
    :type party_id: str
    :param country_code: ISO country code (2 characters).
    :type country_code: str
    :param business_details: Optional business details.
    :type business_details: BusinessDetails | None
    """

    role: RoleType
    party_id: str
    country_code: str
    business_details: BusinessDetails | None = None


# --------------------------------------------------------------------------- #
# Input
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class CredentialsIn:
    """
    Credentials payload posted by a partner (register or update).

    :param token: Token the hub must use to call the partner.
    :type token: str
    :param url: Partner's versions endpoint.
    :type url: str
    :param roles: Declared roles, in order. The first one names the partner.
    :type roles: tuple[CredentialRole, ...]
    """

    token: str
    url: str
    roles: tuple[CredentialRole, ...] = ()


# --------------------------------------------------------------------------- #
# Output
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class CredentialsOut:
    """
    Hub credentials handed to a partner.

    :param token: Token the partner presents when calling the hub.
    :type token: str
    :param url: Hub's versioned base URL.
    :type url: str
    :param roles: Hub roles (a single HUB role).
    :type roles: tuple[CredentialRole, ...]
    """

    token: str
    url: str
    roles: tuple[CredentialRole, ...]


@dataclass(frozen=True, slots=True)
class PartnerIdentity:
    """
    Authenticated partner attached to the request context.

    :param partner_id: Derived partner identifier.
    :type partner_id: str
    :param type: Partner type used by role-gated operations.
    :type type: PartnerType
    :param name: Display name.
    :type name: str
    """

    partner_id: str
    type: PartnerType
    name: str = ""


# --------------------------------------------------------------------------- #
# Directory records
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class PartnerCredentials:
    """
    Credentials embedded in a partner record (the partner's side).

    :param token: Partner-issued token used by the hub to call the partner.
    :type token: str
    :param url: Partner's versions endpoint.
    :type url: str
    :param roles: Declared roles (at least one).
    :type roles: tuple[CredentialRole, ...]
    :param version: OCPI version negotiated during the handshake.
    :type version: str
    :param version_url: Optional version details URL.
    :type version_url: str | None
    """

    token: str
    url: str
    roles: tuple[CredentialRole, ...]
    version: str
    version_url: str | None = None


@dataclass(frozen=True, slots=True)
class PartnerRecord:
    """
    Transient copy of a directory entry.

    :param partner_id: Unique derived identifier.
    :type partner_id: str
    :param name: Display name.
    :type name: str
    :param type: Partner type (immutable after registration).
    :type type: PartnerType
    :param credentials: Partner-side credentials.
    :type credentials: PartnerCredentials
    :param token: Hub-issued token; the directory's second unique key.
    :type token: str
    :param status: Lifecycle status.
    :type status: PartnerStatus
    :param id: Surrogate key assigned by the store.
    :type id: int | None
    :param created_at: Creation time (UTC), set by the directory.
    :type created_at: datetime | None
    :param updated_at: Last update time (UTC), set by the directory.
    :type updated_at: datetime | None
    """

    partner_id: str
    name: str
    type: PartnerType
    credentials: PartnerCredentials
    token: str
    status: PartnerStatus = PartnerStatus.ACTIVE
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def identity(self) -> PartnerIdentity:
        return PartnerIdentity(partner_id=self.partner_id, type=self.type, name=self.name)


@dataclass(frozen=True, slots=True)
class PartnerListOut:
    """
    Page of partners for administrative listings.

    :param items: Partners, newest first.
    :type items: Sequence[PartnerRecord]
    :param meta: Window and total count.
    :type meta: PageMeta
    """

    items: Sequence[PartnerRecord]
    meta: PageMeta
