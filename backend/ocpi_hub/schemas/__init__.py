"""Convenience exports for application schemas."""

from __future__ import annotations

from .credentials import (
    BusinessDetailsSchema,
    CredentialRoleSchema,
    CredentialsRequestSchema,
    CredentialsResponseSchema,
    ImageSchema,
    PartnerSummarySchema,
)
from .versions import EndpointSchema, VersionDetailsSchema, VersionSchema

__all__ = [
    "BusinessDetailsSchema",
    "CredentialRoleSchema",
    "CredentialsRequestSchema",
    "CredentialsResponseSchema",
    "ImageSchema",
    "PartnerSummarySchema",
    "EndpointSchema",
    "VersionDetailsSchema",
    "VersionSchema",
]
