"""Role and identifier rules applied to incoming credentials."""

from __future__ import annotations

from collections.abc import Sequence

from ocpi_hub.models.enums import PartnerType
from ocpi_hub.services._shared.errors import ValidationError
from ocpi_hub.services.credentials.dto import CredentialRole

COUNTRY_CODE_LENGTH = 2
PARTY_ID_LENGTH = 3


def validate_roles(roles: Sequence[CredentialRole], partner_type: PartnerType) -> None:
    """
    Check declared roles against the claimed partner type.

    Roles are checked in order and the first violation is raised; values are
    not normalized (no trimming, no case folding).

    :param roles: Declared roles.
    :type roles: Sequence[CredentialRole]
    :param partner_type: Type the partner registers (or is registered) as.
    :type partner_type: PartnerType
    :raises ValidationError: On the first broken rule.
    """
    if not roles:
        raise ValidationError("at least one role required")

    expected = PartnerType(partner_type).value
    for role in roles:
        if getattr(role.role, "value", role.role) != expected:
            raise ValidationError(f"{expected} partner must have {expected} role")
        if len(role.country_code) != COUNTRY_CODE_LENGTH:
            raise ValidationError("country code must be 2 characters")
        if len(role.party_id) != PARTY_ID_LENGTH:
            raise ValidationError("party ID must be 3 characters")
