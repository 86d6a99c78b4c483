"""Token issuing adapters."""

from .secure_token_issuer import SecureTokenIssuer

__all__ = ["SecureTokenIssuer"]
