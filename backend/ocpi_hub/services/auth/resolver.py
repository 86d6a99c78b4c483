"""Resolve the ``Authorization`` header of inbound requests to a partner."""

from __future__ import annotations

from ocpi_hub.models.enums import PartnerType
from ocpi_hub.services._shared.context import CallContext
from ocpi_hub.services._shared.errors import ForbiddenError, UnauthorizedError
from ocpi_hub.services.credentials.dto import PartnerIdentity
from ocpi_hub.services.credentials.service import CredentialsService

TOKEN_PREFIX = "Token "


def extract_token(header: str | None) -> str:
    """
    Return the bearer value of an ``Authorization`` header.

    An exact, case-sensitive ``"Token "`` prefix is stripped once when a
    value follows it; any other header, a bare prefix included, is used
    verbatim.

    :raises UnauthorizedError: When the header is missing or empty.
    """
    if not header:
        raise UnauthorizedError("missing authorization token")
    if len(header) > len(TOKEN_PREFIX) and header.startswith(TOKEN_PREFIX):
        return header[len(TOKEN_PREFIX) :]
    return header


class AuthenticationResolver:
    """
    Authenticate requests against hub tokens and gate them by partner type.

    :param service: Credentials service used to validate tokens.
    :type service: CredentialsService
    """

    def __init__(self, service: CredentialsService) -> None:
        self.service = service

    def resolve(self, header: str | None, *, ctx: CallContext | None = None) -> PartnerIdentity:
        """
        Resolve the header to an active partner.

        :raises UnauthorizedError: When the token is missing, unknown, or
            bound to an inactive partner.
        """
        token = extract_token(header)
        return self.service.validate_token(token, ctx=ctx)

    @staticmethod
    def ensure_type(identity: PartnerIdentity | None, required: PartnerType) -> PartnerIdentity:
        """
        Require an authenticated partner of type ``required``.

        :raises UnauthorizedError: When no partner is attached.
        :raises ForbiddenError: When the partner has another type.
        """
        if identity is None:
            raise UnauthorizedError("missing authorization token")
        required = PartnerType(required)
        if identity.type != required:
            raise ForbiddenError(f"this endpoint requires {required.value} role")
        return identity
