"""Service layer public API.

This package exposes the building blocks of the service layer so that callers
can import from :mod:`ocpi_hub.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``ocpi_hub.services._shared.base``)
    * :class:`BaseService`
    * :class:`CallContext`

- Credentials service (from ``ocpi_hub.services.credentials``)
    * :class:`CredentialsService`
    * DTOs: :class:`CredentialsIn`, :class:`CredentialsOut`,
      :class:`CredentialRole`, :class:`BusinessDetails`, :class:`Image`,
      :class:`PartnerRecord`, :class:`PartnerIdentity`,
      :class:`PartnerListOut`

- Authentication (from ``ocpi_hub.services.auth``)
    * :class:`AuthenticationResolver`
"""

from __future__ import annotations

# Base primitives (service base + request-scoped context)
from ._shared.base import BaseService
from ._shared.context import CallContext
from .auth.resolver import AuthenticationResolver

# Credentials service + DTOs
from .credentials.dto import (
    BusinessDetails,
    CredentialRole,
    CredentialsIn,
    CredentialsOut,
    Image,
    PartnerIdentity,
    PartnerListOut,
    PartnerRecord,
)
from .credentials.service import CredentialsService

__all__ = [
    # Base
    "BaseService",
    "CallContext",
    # Credentials
    "CredentialsService",
    "CredentialsIn",
    "CredentialsOut",
    "CredentialRole",
    "BusinessDetails",
    "Image",
    "PartnerRecord",
    "PartnerIdentity",
    "PartnerListOut",
    # Auth
    "AuthenticationResolver",
]
