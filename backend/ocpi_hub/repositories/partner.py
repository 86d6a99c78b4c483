"""Partner repository for directory lookups and administrative scans."""

from __future__ import annotations

from typing import cast

from sqlalchemy import func, select

from ocpi_hub.models.partner import Partner
from ocpi_hub.repositories.base import BaseRepository, Page, paginate_select


class PartnerRepository(BaseRepository[Partner]):
    """Persistence-only repository for :class:`Partner`.

    Lookups go through the two unique keys (``partner_id`` and hub token).
    """

    model = Partner

    def _updatable_fields(self):
        """Fields rewritten on credentials update or status transition."""
        return {
            "name",
            "status",
            "token",
            "credentials_token",
            "credentials_url",
            "credentials_version",
            "credentials_version_url",
            "roles",
        }

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_partner_id(self, partner_id: str) -> Partner | None:
        """Fetch a partner by its derived identifier.

        :param partner_id: ``countryCode-partyId`` value.
        :type partner_id: str
        :returns: Partner or ``None`` when not found.
        :rtype: Partner | None
        """
        stmt = select(Partner).where(Partner.partner_id == partner_id)
        return cast(Partner | None, self.session.execute(stmt).scalars().first())

    def get_by_token(self, token: str) -> Partner | None:
        """Fetch a partner by the hub-issued token it presents."""
        stmt = select(Partner).where(Partner.token == token)
        return cast(Partner | None, self.session.execute(stmt).scalars().first())

    # ---------------------------- Scans ----------------------------

    def list_recent(self, *, offset: int, limit: int, with_total: bool = False) -> Page[Partner]:
        """List partners newest first; ``id`` breaks creation-time ties.

        :param offset: Rows to skip.
        :type offset: int
        :param limit: Window size.
        :type limit: int
        :param with_total: Also count every partner.
        :type with_total: bool
        :rtype: Page[Partner]
        """
        stmt = select(Partner).order_by(Partner.created_at.desc(), Partner.id.desc())
        items, total = paginate_select(
            self.session, stmt, offset=offset, limit=limit, with_total=with_total
        )
        return Page(items=items, total=total, offset=offset, limit=limit)

    def count(self) -> int:
        return int(self.session.execute(select(func.count(Partner.id))).scalar_one())
