"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

DEFAULT_OCPI_VERSION: Final[str] = "2.3"

# Loads .env in development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_float(name: str, default: float) -> float:
    """Parse a float from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return float(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    OCPI_BASE_PREFIX: str
        Root path for registering OCPI blueprints.
    OCPI_VERSION: str
        Protocol version served by the hub and stored on partner credentials.
    HUB_BASE_URL: str | None
        Public base URL of the versioned API handed to partners during the
        credentials handshake. Derived from ``SERVER_NAME``-less defaults when
        unset (see :func:`build_hub_settings`).
    HUB_PARTY_ID: str
        Party identifier of the hub's own credentials role.
    HUB_COUNTRY_CODE: str
        Country code of the hub's own credentials role.
    HUB_BUSINESS_NAME: str
        Business name reported in the hub's credentials role.
    STORE_TIMEOUT_SECONDS: float
        Deadline applied to every partner directory call made while serving a
        request. ``0`` disables the deadline.
    TOKEN_MINT_ATTEMPTS: int
        Upper bound of token mint attempts when a freshly minted token
        collides with a stored one.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    SQLALCHEMY_TRACK_MODIFICATIONS: bool
        Disabled to avoid extra overhead from the event system.
    SQLALCHEMY_ECHO: bool
        When ``True`` SQLAlchemy logs SQL statements for debugging.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    USE_PROXYFIX: bool
        Trust one hop of ``X-Forwarded-*`` headers.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    OCPI_BASE_PREFIX = "/ocpi"
    OCPI_VERSION = os.getenv("OCPI_VERSION", DEFAULT_OCPI_VERSION)

    # Hub identity
    HUB_BASE_URL = os.getenv("HUB_BASE_URL")
    HUB_PARTY_ID = os.getenv("HUB_PARTY_ID", "HUB")
    HUB_COUNTRY_CODE = os.getenv("HUB_COUNTRY_CODE", "US")
    HUB_BUSINESS_NAME = os.getenv("HUB_BUSINESS_NAME", "ChargeSphere Hub")

    # Directory calls
    STORE_TIMEOUT_SECONDS = env_float("STORE_TIMEOUT_SECONDS", 10.0)
    TOKEN_MINT_ATTEMPTS = int(os.getenv("TOKEN_MINT_ATTEMPTS", "3"))

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./ocpi_hub.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & proxy
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Pins the hub URL so handshake payloads are deterministic.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    HUB_BASE_URL = "http://localhost:8080/ocpi/2.3"
    USE_PROXYFIX = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


@dataclass(frozen=True, slots=True)
class HubSettings:
    """
    Immutable hub identity handed to the credentials service.

    :param base_url: Versioned base URL partners use to reach the hub.
    :type base_url: str
    :param version: OCPI version stored on partner credentials.
    :type version: str
    :param party_id: Party id of the hub's credentials role.
    :type party_id: str
    :param country_code: Country code of the hub's credentials role.
    :type country_code: str
    :param business_name: Business name of the hub's credentials role.
    :type business_name: str
    :param token_mint_attempts: Bound on re-mints after a token collision.
    :type token_mint_attempts: int
    """

    base_url: str
    version: str = DEFAULT_OCPI_VERSION
    party_id: str = "HUB"
    country_code: str = "US"
    business_name: str = "ChargeSphere Hub"
    token_mint_attempts: int = 3


def build_hub_settings(config: Mapping[str, Any]) -> HubSettings:
    """Build :class:`HubSettings` once from a Flask config mapping.

    When ``HUB_BASE_URL`` is unset the URL defaults to
    ``http://localhost:8080/ocpi/<version>``.
    """
    version = str(config.get("OCPI_VERSION") or DEFAULT_OCPI_VERSION)
    base_url = config.get("HUB_BASE_URL") or f"http://localhost:8080/ocpi/{version}"
    return HubSettings(
        base_url=str(base_url).rstrip("/"),
        version=version,
        party_id=str(config.get("HUB_PARTY_ID", "HUB")),
        country_code=str(config.get("HUB_COUNTRY_CODE", "US")),
        business_name=str(config.get("HUB_BUSINESS_NAME", "ChargeSphere Hub")),
        token_mint_attempts=max(1, int(config.get("TOKEN_MINT_ATTEMPTS", 3))),
    )
