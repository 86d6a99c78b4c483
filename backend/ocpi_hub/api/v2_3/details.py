"""Version details: the modules and interface roles exposed under 2.3."""

from __future__ import annotations

from flask import Blueprint

from ocpi_hub.api.deps import get_hub_settings, ocpi_response, timing
from ocpi_hub.schemas import VersionDetailsSchema

bp = Blueprint("version_details_2_3", __name__)

details_schema = VersionDetailsSchema()

# (module identifier, interface role) pairs served by this version
MODULES: tuple[tuple[str, str], ...] = (
    ("credentials", "SENDER"),
    ("credentials", "RECEIVER"),
)


@bp.get("", strict_slashes=False)
@timing
def version_details():
    """Return the endpoints of every module implemented for this version."""

    settings = get_hub_settings()
    endpoints = [
        {"identifier": identifier, "role": role, "url": f"{settings.base_url}/{identifier}"}
        for identifier, role in MODULES
    ]
    return ocpi_response(details_schema.dump({"version": settings.version, "endpoints": endpoints}))
