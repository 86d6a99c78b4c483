"""OCPI 2.3 blueprint package bundling the version's modules."""

from __future__ import annotations

from flask import Blueprint

API_VERSION = "2.3"

# Import blueprints *only here* to keep imports localized and avoid cycles.
from .credentials import bp as credentials_bp  # noqa: E402
from .details import bp as details_bp  # noqa: E402

# Each tuple: (blueprint, url_prefix_relative_to_version)
REGISTRY: list[tuple[Blueprint, str]] = [
    (details_bp, ""),  # -> /ocpi/2.3
    (credentials_bp, "/credentials"),  # -> /ocpi/2.3/credentials
]
