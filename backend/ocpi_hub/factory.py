"""Application factory wiring Flask extensions, services and blueprints."""

from __future__ import annotations

from flask import Flask

from ocpi_hub.core.config import BaseConfig, build_hub_settings, get_config
from ocpi_hub.core.logger import configure_logging, init_app as init_logging
from ocpi_hub.services._shared.ports import PartnerDirectory, TokenIssuer


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    directory: PartnerDirectory | None = None,
    token_issuer: TokenIssuer | None = None,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config object or import path; defaults to ``APP_ENV``.
    :param directory: Partner directory override (SQLAlchemy by default).
    :param token_issuer: Token issuer override (OS CSPRNG by default).
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from ocpi_hub.core import proxy

    proxy.init_app(app)

    from ocpi_hub.core import extensions

    extensions.init_app(app)

    init_logging(app)

    _init_services(app, directory=directory, token_issuer=token_issuer)

    from ocpi_hub.api import init_app as init_api

    init_api(app)

    from ocpi_hub.core import errors

    errors.init_app(app)

    from ocpi_hub import cli as app_cli

    app_cli.init_app(app)

    return app


def _init_services(
    app: Flask,
    *,
    directory: PartnerDirectory | None,
    token_issuer: TokenIssuer | None,
) -> None:
    """Build the stateless credentials service once and expose it on ``app.extensions``."""

    from ocpi_hub.api.deps import EXTENSION_KEY
    from ocpi_hub.infra.sqlalchemy import SQLAlchemyPartnerDirectory
    from ocpi_hub.infra.tokens import SecureTokenIssuer
    from ocpi_hub.services import AuthenticationResolver, CredentialsService

    settings = build_hub_settings(app.config)
    service = CredentialsService(
        directory if directory is not None else SQLAlchemyPartnerDirectory(),
        token_issuer if token_issuer is not None else SecureTokenIssuer(),
        settings,
    )
    app.extensions[EXTENSION_KEY] = {
        "settings": settings,
        "credentials_service": service,
        "resolver": AuthenticationResolver(service),
    }
