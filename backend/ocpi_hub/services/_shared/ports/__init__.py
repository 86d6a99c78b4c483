"""
ocpi_hub.services._shared.ports
===============================

Ports (hexagonal interfaces) the credentials service depends on.

Modules
-------
- :mod:`partner_directory`:
    Defines :class:`~.PartnerDirectory`, the durable partner store, and the
    lock-protected :class:`~.InMemoryPartnerDirectory` fake.

- :mod:`token_issuer`:
    Defines :class:`~.TokenIssuer`, the opaque hub-token source, and the
    deterministic :class:`~.StubTokenIssuer`.

Concrete adapters (SQLAlchemy, OS randomness) live under ``ocpi_hub.infra``.
"""

from __future__ import annotations

from .partner_directory import DUPLICATE_PARTNER, InMemoryPartnerDirectory, PartnerDirectory
from .token_issuer import StubTokenIssuer, TokenIssuer

__all__ = [
    "DUPLICATE_PARTNER",
    "InMemoryPartnerDirectory",
    "PartnerDirectory",
    "StubTokenIssuer",
    "TokenIssuer",
]
