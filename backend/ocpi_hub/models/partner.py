"""Partner model: a CPO or EMSP registered with the hub."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Enum, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from ocpi_hub.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin
from .enums import PartnerStatus, PartnerType

PARTNER_ID_CONSTRAINT = "uq_partners_partner_id"
TOKEN_CONSTRAINT = "uq_partners_token"


def _enum_values(enum_cls: type) -> list[str]:
    return [member.value for member in enum_cls]


class Partner(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Persisted partner registration.

    Fields
    ------
    partner_id : str
        ``countryCode-partyId`` of the first declared role. Unique.
    name : str
        Display name derived from the declared business details.
    type : PartnerType
        CPO or EMSP; immutable after registration.
    status : PartnerStatus
        Lifecycle state. Only ``ACTIVE`` partners authenticate.
    token : str
        Hub-issued bearer token the partner presents to the hub. Unique.
    credentials_token : str
        Partner-issued token the hub uses to call the partner.
    credentials_url : str
        Partner's versions endpoint.
    credentials_version : str
        OCPI version negotiated during the handshake.
    credentials_version_url : str | None
        Optional version details URL reported by the partner.
    roles : list[dict]
        Embedded credentials roles, stored as JSON in declaration order.
    """

    __tablename__ = "partners"

    partner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[PartnerType] = mapped_column(
        Enum(
            PartnerType,
            name="partner_type",
            native_enum=False,
            length=8,
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    status: Mapped[PartnerStatus] = mapped_column(
        Enum(
            PartnerStatus,
            name="partner_status",
            native_enum=False,
            length=16,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=PartnerStatus.ACTIVE,
    )
    token: Mapped[str] = mapped_column(String(128), nullable=False)

    # Embedded credentials document
    credentials_token: Mapped[str] = mapped_column(String(255), nullable=False)
    credentials_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    credentials_version: Mapped[str] = mapped_column(String(16), nullable=False)
    credentials_version_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    roles: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        UniqueConstraint("partner_id", name=PARTNER_ID_CONSTRAINT),
        UniqueConstraint("token", name=TOKEN_CONSTRAINT),
        Index("ix_partners_status", "status"),
    )

    @validates("roles")
    def _require_roles(self, key: str, value: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Reject empty role lists at the persistence boundary.

        :raises ValueError: If no role is provided.
        """
        if not value:
            raise ValueError("Partner requires at least one credentials role.")
        return list(value)
