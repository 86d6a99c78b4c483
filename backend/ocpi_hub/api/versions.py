"""OCPI versions list: the public entry point partners discover first."""

from __future__ import annotations

from flask import Blueprint

from ocpi_hub.api.deps import get_hub_settings, ocpi_response, timing
from ocpi_hub.schemas import VersionSchema

bp = Blueprint("versions", __name__)

version_schema = VersionSchema(many=True)


@bp.get("/versions")
@timing
def list_versions():
    """Return the OCPI versions the hub speaks, with their details URLs."""

    settings = get_hub_settings()
    versions = [{"version": settings.version, "url": settings.base_url}]
    return ocpi_response(version_schema.dump(versions))
