"""Hub token issuer backed by the operating system CSPRNG."""

from __future__ import annotations

import logging
import secrets

from ocpi_hub.services._shared.errors import InternalError

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


class SecureTokenIssuer:
    """
    Mint opaque tokens of ``TOKEN_BYTES`` random bytes, hex encoded.

    Tokens are 64 lowercase hex characters. Uniqueness is not checked here;
    the partner directory rejects collisions.
    """

    def __init__(self, nbytes: int = TOKEN_BYTES) -> None:
        self.nbytes = nbytes

    def mint(self) -> str:
        try:
            return secrets.token_bytes(self.nbytes).hex()
        except (OSError, NotImplementedError) as exc:
            logger.error("randomness source unavailable: %s", exc)
            raise InternalError("failed to generate token") from exc
