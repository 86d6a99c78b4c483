"""
CredentialsService
==================

Orchestrates the OCPI credentials handshake between partners and the hub:

- Registers a partner and hands out a freshly minted hub token.
- Returns, rotates, and revokes the hub credentials of a registered partner.
- Validates hub tokens presented on inbound requests.

The service owns no shared state; uniqueness of ``partner_id`` and of the hub
token is enforced atomically by the :class:`PartnerDirectory`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace

from ocpi_hub.core.config import HubSettings
from ocpi_hub.models.enums import PartnerStatus, PartnerType, RoleType
from ocpi_hub.services._shared.base import BaseService
from ocpi_hub.services._shared.context import CallContext, ensure_context
from ocpi_hub.services._shared.dto import PageMeta
from ocpi_hub.services._shared.errors import ConflictError, NotFoundError, UnauthorizedError
from ocpi_hub.services._shared.ports import DUPLICATE_PARTNER, PartnerDirectory, TokenIssuer
from ocpi_hub.services.credentials.dto import (
    BusinessDetails,
    CredentialRole,
    CredentialsIn,
    CredentialsOut,
    PartnerCredentials,
    PartnerIdentity,
    PartnerListOut,
    PartnerRecord,
)
from ocpi_hub.services.credentials.validation import validate_roles

logger = logging.getLogger(__name__)


def derive_partner_id(roles: Sequence[CredentialRole]) -> str:
    """Return ``countryCode-partyId`` of the first declared role."""
    first = roles[0]
    return f"{first.country_code}-{first.party_id}"


def extract_business_name(roles: Sequence[CredentialRole]) -> str:
    """
    Derive a display name from declared roles.

    The first role carrying a non-empty business name wins; otherwise the
    name falls back to ``countryCode-partyId`` of the first role.
    """
    for role in roles:
        if role.business_details is not None and role.business_details.name:
            return role.business_details.name
    return derive_partner_id(roles)


class CredentialsService(BaseService):
    """
    Application service for the credentials module.

    :param directory: Partner store.
    :type directory: PartnerDirectory
    :param token_issuer: Source of hub tokens.
    :type token_issuer: TokenIssuer
    :param settings: Hub identity and minting policy.
    :type settings: HubSettings
    """

    def __init__(
        self,
        directory: PartnerDirectory,
        token_issuer: TokenIssuer,
        settings: HubSettings,
    ) -> None:
        self.directory = directory
        self.token_issuer = token_issuer
        self.settings = settings

    # ------------------------------------------------------------------ #
    # Handshake
    # ------------------------------------------------------------------ #

    def register(
        self,
        request: CredentialsIn,
        claimed_type: PartnerType,
        *,
        ctx: CallContext | None = None,
    ) -> CredentialsOut:
        """
        Register a new partner and return the hub credentials.

        :param request: Partner credentials (token, url, roles).
        :type request: CredentialsIn
        :param claimed_type: Type the partner registers as.
        :type claimed_type: PartnerType
        :param ctx: Deadline/cancellation forwarded to every directory call.
        :type ctx: CallContext | None
        :returns: Hub credentials carrying the freshly minted token.
        :rtype: CredentialsOut
        :raises ValidationError: When a role breaks a rule.
        :raises ConflictError: When the derived ``partner_id`` is taken.
        :raises InternalError: When token minting fails.
        """
        ctx = ensure_context(ctx)
        claimed_type = PartnerType(claimed_type)
        validate_roles(request.roles, claimed_type)
        partner_id = derive_partner_id(request.roles)

        self._ensure_unregistered(partner_id, ctx)

        partner = PartnerRecord(
            partner_id=partner_id,
            name=extract_business_name(request.roles),
            type=claimed_type,
            credentials=PartnerCredentials(
                token=request.token,
                url=request.url,
                roles=tuple(request.roles),
                version=self.settings.version,
            ),
            token="",
            status=PartnerStatus.ACTIVE,
        )

        def _create(token: str) -> PartnerRecord:
            return self.directory.create(replace(partner, token=token), ctx=ctx)

        def _on_conflict() -> None:
            # Lost a race for the identity: never retried
            self._ensure_unregistered(partner_id, ctx)

        stored = self._write_with_fresh_token(_create, _on_conflict, partner_id=partner_id)
        logger.info(
            "partner registered",
            extra={"partner_id": stored.partner_id, "partner_type": stored.type.value},
        )
        return self.hub_credentials(stored.token)

    def get_credentials(self, token: str, *, ctx: CallContext | None = None) -> CredentialsOut:
        """
        Return the hub credentials for an active partner.

        The presented token is echoed unchanged; reading never rotates.

        :raises UnauthorizedError: When the token is unknown or the partner
            is not active.
        """
        self.validate_token(token, ctx=ctx)
        return self.hub_credentials(token)

    def update_credentials(
        self,
        token: str,
        request: CredentialsIn,
        *,
        ctx: CallContext | None = None,
    ) -> CredentialsOut:
        """
        Replace the partner's credentials and rotate its hub token.

        Roles are validated against the stored partner type. The new hub
        token replaces the presented one in the same write, so the presented
        token stops authenticating as soon as the call succeeds.

        :param token: Hub token the partner authenticated with.
        :type token: str
        :param request: New partner credentials.
        :type request: CredentialsIn
        :returns: Hub credentials carrying the rotated token.
        :rtype: CredentialsOut
        :raises UnauthorizedError: When the token is unknown or the partner
            is not active.
        :raises ValidationError: When a role breaks a rule.
        """
        ctx = ensure_context(ctx)
        current = self._authenticate(token, ctx)
        validate_roles(request.roles, current.type)

        updated = replace(
            current,
            name=extract_business_name(request.roles),
            credentials=replace(
                current.credentials,
                token=request.token,
                url=request.url,
                roles=tuple(request.roles),
            ),
        )

        def _update(new_token: str) -> PartnerRecord:
            return self.directory.update(
                current.partner_id, replace(updated, token=new_token), ctx=ctx
            )

        stored = self._write_with_fresh_token(
            _update, lambda: None, partner_id=current.partner_id, avoid=token
        )
        logger.info(
            "credentials rotated",
            extra={"partner_id": stored.partner_id, "partner_type": stored.type.value},
        )
        return self.hub_credentials(stored.token)

    def delete_credentials(self, token: str, *, ctx: CallContext | None = None) -> None:
        """
        Deregister the partner owning ``token``.

        :raises UnauthorizedError: When the token is unknown or the partner
            is not active.
        :raises NotFoundError: When the partner vanished concurrently.
        """
        ctx = ensure_context(ctx)
        current = self._authenticate(token, ctx)
        self.directory.delete(current.partner_id, ctx=ctx)
        logger.info("partner deleted", extra={"partner_id": current.partner_id})

    def validate_token(self, token: str, *, ctx: CallContext | None = None) -> PartnerIdentity:
        """
        Resolve a hub token to the identity of an active partner.

        :raises UnauthorizedError: When the token is unknown or the partner
            is not active.
        """
        return self._authenticate(token, ensure_context(ctx)).identity()

    def hub_credentials(self, token: str) -> CredentialsOut:
        """Return the hub credentials carrying ``token``."""
        settings = self.settings
        return CredentialsOut(
            token=token,
            url=settings.base_url,
            roles=(
                CredentialRole(
                    role=RoleType.HUB,
                    party_id=settings.party_id,
                    country_code=settings.country_code,
                    business_details=BusinessDetails(name=settings.business_name),
                ),
            ),
        )

    # ------------------------------------------------------------------ #
    # Administration
    # ------------------------------------------------------------------ #

    def list_partners(
        self, *, offset: int = 0, limit: int = 50, ctx: CallContext | None = None
    ) -> PartnerListOut:
        """Return a page of partners (newest first) with the total count."""
        ctx = ensure_context(ctx)
        window = self.ensure_pagination(offset=offset, limit=limit)
        items = self.directory.list(window.offset, window.limit, ctx=ctx)
        total = self.directory.count(ctx=ctx)
        return PartnerListOut(
            items=tuple(items),
            meta=PageMeta(
                offset=window.offset,
                limit=window.limit,
                total=total,
                has_next=window.offset + len(items) < total,
            ),
        )

    def set_status(
        self, partner_id: str, status: PartnerStatus, *, ctx: CallContext | None = None
    ) -> PartnerRecord:
        """
        Move a partner to another lifecycle state.

        :raises NotFoundError: When ``partner_id`` is unknown.
        """
        stored = self.directory.update_status(
            partner_id, PartnerStatus(status), ctx=ensure_context(ctx)
        )
        logger.info(
            "status changed",
            extra={"partner_id": stored.partner_id, "status": stored.status.value},
        )
        return stored

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _lookup(self, token: str, ctx: CallContext) -> PartnerRecord:
        try:
            return self.directory.find_by_token(token, ctx=ctx)
        except NotFoundError:
            raise UnauthorizedError("invalid token") from None

    def _authenticate(self, token: str, ctx: CallContext) -> PartnerRecord:
        partner = self._lookup(token, ctx)
        if partner.status != PartnerStatus.ACTIVE:
            raise UnauthorizedError("partner is not active")
        return partner

    def _ensure_unregistered(self, partner_id: str, ctx: CallContext) -> None:
        try:
            self.directory.find_by_partner_id(partner_id, ctx=ctx)
        except NotFoundError:
            return
        raise ConflictError("partner", f"partner {partner_id} already registered")

    def _write_with_fresh_token(
        self,
        write: Callable[[str], PartnerRecord],
        on_conflict: Callable[[], None],
        *,
        partner_id: str,
        avoid: str | None = None,
    ) -> PartnerRecord:
        """
        Run ``write`` with a newly minted token, re-minting on token collisions.

        ``on_conflict`` runs after each conflicting write and raises when the
        collision is not caused by the token. At most
        ``settings.token_mint_attempts`` tokens are tried.
        """
        attempts = self.settings.token_mint_attempts
        for attempt in range(1, attempts + 1):
            token = self.token_issuer.mint()
            if token == avoid:
                logger.warning(
                    "minted token equals presented token",
                    extra={"partner_id": partner_id, "attempt": attempt},
                )
                continue
            try:
                return write(token)
            except ConflictError:
                on_conflict()
                logger.warning(
                    "hub token collision", extra={"partner_id": partner_id, "attempt": attempt}
                )
        raise ConflictError("partner", DUPLICATE_PARTNER)

