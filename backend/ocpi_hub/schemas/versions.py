"""Marshmallow schemas for the OCPI versions module."""

from __future__ import annotations

from marshmallow import Schema, fields


class VersionSchema(Schema):
    """Entry of the supported versions list."""

    version = fields.String(required=True)
    url = fields.String(required=True)


class EndpointSchema(Schema):
    """Module endpoint advertised in the version details."""

    identifier = fields.String(required=True)
    role = fields.String(required=True)
    url = fields.String(required=True)


class VersionDetailsSchema(Schema):
    version = fields.String(required=True)
    endpoints = fields.List(fields.Nested(EndpointSchema), required=True)
