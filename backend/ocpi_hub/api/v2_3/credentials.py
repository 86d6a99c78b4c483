"""OCPI 2.3 credentials module: the registration and token-exchange handshake."""

from __future__ import annotations

from flask import Blueprint, request

from ocpi_hub.api.deps import (
    bearer_token,
    call_context,
    get_credentials_service,
    ocpi_response,
    partner_type_from_request,
    require_partner,
    timing,
)
from ocpi_hub.schemas import CredentialsRequestSchema, CredentialsResponseSchema

bp = Blueprint("credentials_2_3", __name__)

request_schema = CredentialsRequestSchema()
response_schema = CredentialsResponseSchema()


def _load_credentials():
    # Undecodable JSON raises werkzeug's BadRequest, rendered as 1001
    return request_schema.load(request.get_json(force=True))


@bp.post("", strict_slashes=False)
@timing
def register():
    """Register the calling partner and return the hub credentials."""

    payload = _load_credentials()
    service = get_credentials_service()
    credentials = service.register(payload, partner_type_from_request(), ctx=call_context())
    return ocpi_response(response_schema.dump(credentials))


@bp.get("", strict_slashes=False)
@require_partner
@timing
def get_credentials():
    """Return the hub credentials, echoing the presented token."""

    # require_partner already validated the token
    credentials = get_credentials_service().hub_credentials(bearer_token())
    return ocpi_response(response_schema.dump(credentials))


@bp.put("", strict_slashes=False)
@require_partner
@timing
def update_credentials():
    """Replace the partner's credentials and rotate the hub token."""

    payload = _load_credentials()
    service = get_credentials_service()
    credentials = service.update_credentials(bearer_token(), payload, ctx=call_context())
    return ocpi_response(response_schema.dump(credentials))


@bp.delete("", strict_slashes=False)
@require_partner
@timing
def delete_credentials():
    """Deregister the partner owning the presented token."""

    get_credentials_service().delete_credentials(bearer_token(), ctx=call_context())
    return ocpi_response(None)
