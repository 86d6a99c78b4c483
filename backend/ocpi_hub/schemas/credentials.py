"""Marshmallow schemas for the OCPI credentials module."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_dump, post_load

from ocpi_hub.models.enums import ImageCategory, PartnerStatus, PartnerType, RoleType
from ocpi_hub.services.credentials.dto import (
    BusinessDetails,
    CredentialRole,
    CredentialsIn,
    Image,
)


class _SkipNoneSchema(Schema):
    """Drop ``None`` members on dump, as OCPI omits absent optional fields."""

    class Meta:
        unknown = EXCLUDE

    @post_dump
    def skip_none(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        return {key: value for key, value in data.items() if value is not None}


class ImageSchema(_SkipNoneSchema):
    url = fields.Url(required=True, require_tld=False)
    thumbnail = fields.Url(load_default=None, allow_none=True, require_tld=False)
    category = fields.Enum(ImageCategory, by_value=True, load_default=ImageCategory.OPERATOR)
    type = fields.String(load_default="")
    width = fields.Integer(load_default=None, allow_none=True)
    height = fields.Integer(load_default=None, allow_none=True)

    @post_load
    def make_image(self, data: dict[str, Any], **_: Any) -> Image:
        return Image(**data)


class BusinessDetailsSchema(_SkipNoneSchema):
    name = fields.String(required=True)
    website = fields.String(load_default=None, allow_none=True)
    logo = fields.Nested(ImageSchema, load_default=None, allow_none=True)

    @post_load
    def make_details(self, data: dict[str, Any], **_: Any) -> BusinessDetails:
        return BusinessDetails(**data)


class CredentialRoleSchema(_SkipNoneSchema):
    """
    One credentials role.

    Lengths of ``party_id`` and ``country_code`` are checked by the service,
    not here, so that rule violations are reported as business failures.
    """

    role = fields.Enum(RoleType, by_value=True, required=True)
    party_id = fields.String(required=True)
    country_code = fields.String(required=True)
    business_details = fields.Nested(BusinessDetailsSchema, load_default=None, allow_none=True)

    @post_load
    def make_role(self, data: dict[str, Any], **_: Any) -> CredentialRole:
        return CredentialRole(**data)


class CredentialsRequestSchema(Schema):
    """Payload of ``POST``/``PUT /credentials``; loads a :class:`CredentialsIn`."""

    class Meta:
        unknown = EXCLUDE

    token = fields.String(required=True)
    url = fields.Url(required=True, require_tld=False)
    roles = fields.List(fields.Nested(CredentialRoleSchema), required=True)

    @post_load
    def make_credentials(self, data: dict[str, Any], **_: Any) -> CredentialsIn:
        return CredentialsIn(token=data["token"], url=data["url"], roles=tuple(data["roles"]))


class CredentialsResponseSchema(Schema):
    """Hub credentials handed to partners."""

    token = fields.String()
    url = fields.String()
    roles = fields.List(fields.Nested(CredentialRoleSchema))


class PartnerSummarySchema(Schema):
    """Administrative view of a partner; never exposes tokens."""

    partner_id = fields.String()
    name = fields.String()
    type = fields.Enum(PartnerType, by_value=True)
    status = fields.Enum(PartnerStatus, by_value=True)
    url = fields.Function(lambda partner: partner.credentials.url)
    version = fields.Function(lambda partner: partner.credentials.version)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
