"""API blueprint package aggregating versioned OCPI endpoints."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Register related blueprints beneath a common prefix.

    Parameters
    ----------
    app:
        Application instance receiving the blueprints.
    base_prefix:
        Prefix applied to all entries, typically the OCPI version segment
        such as ``"/ocpi/2.3"``.
    entries:
        Iterable of ``(blueprint, relative_prefix)`` pairs where
        ``relative_prefix`` is appended to ``base_prefix``.

    Notes
    -----
    Empty relative prefixes are supported, allowing a blueprint to mount at the
    version root while others extend it with additional path segments.
    """

    for bp, rel_prefix in entries:
        full_prefix = "/".join(
            segment for segment in [base_prefix.rstrip("/"), rel_prefix.strip("/")] if segment
        )
        full_prefix = "/" + full_prefix if not full_prefix.startswith("/") else full_prefix
        app.register_blueprint(bp, url_prefix=full_prefix)


def init_app(app: Flask) -> None:
    """Register health, the versions list, and every supported OCPI version."""

    from ocpi_hub.api.errors import register_service_error_handlers
    from ocpi_hub.api.health import bp as health_bp
    from ocpi_hub.api.versions import bp as versions_bp
    from ocpi_hub.api.v2_3 import API_VERSION as V2_3
    from ocpi_hub.api.v2_3 import REGISTRY as V2_3_REGISTRY

    ocpi_base = app.config.get("OCPI_BASE_PREFIX", "/ocpi")

    app.register_blueprint(health_bp)
    register_blueprint_group(app, base_prefix=ocpi_base, entries=[(versions_bp, "")])
    register_blueprint_group(app, base_prefix=f"{ocpi_base}/{V2_3}", entries=V2_3_REGISTRY)

    register_service_error_handlers(app)


__all__ = ["init_app", "register_blueprint_group"]
