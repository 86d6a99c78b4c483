"""Pytest fixtures configuring an isolated database and wired services.

Each database-backed test gets a freshly created schema in an in-memory
SQLite database; the partner directory commits for real, so tables are
dropped and recreated around every test instead of rolling back a SAVEPOINT.
"""

from __future__ import annotations

import os

import pytest
from ocpi_hub.core.config import HubSettings, TestingConfig
from ocpi_hub.core.extensions import db as _db  # Flask-SQLAlchemy instance
from ocpi_hub.factory import create_app  # application factory under test
from ocpi_hub.services._shared.ports import InMemoryPartnerDirectory, StubTokenIssuer
from ocpi_hub.services.credentials.service import CredentialsService

HUB_URL = "http://localhost:8080/ocpi/2.3"


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Pins the hub URL so responses are predictable.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    HUB_BASE_URL = HUB_URL
    STORE_TIMEOUT_SECONDS = 5.0
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied, backed by the
        SQLAlchemy directory and the CSPRNG issuer.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture()
def db(app):
    """Create tables for one test inside an application context.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        try:
            yield _db
        finally:
            _db.session.remove()
            _db.drop_all()


@pytest.fixture()
def session(db):
    """Return the Flask-scoped session used by units of work and factories."""
    return db.session


@pytest.fixture()
def client(app, db):
    """Return a Flask test client over a fresh schema."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def hub_settings() -> HubSettings:
    return HubSettings(base_url=HUB_URL)


@pytest.fixture()
def directory() -> InMemoryPartnerDirectory:
    return InMemoryPartnerDirectory()


@pytest.fixture()
def issuer() -> StubTokenIssuer:
    return StubTokenIssuer()


@pytest.fixture()
def service(directory, issuer, hub_settings) -> CredentialsService:
    """Credentials service over in-memory ports."""
    return CredentialsService(directory, issuer, hub_settings)


# -- Hook up Factory Boy to the pytest SQLAlchemy session ---------------------
@pytest.fixture()
def factories_session(session):
    """Wire Factory Boy's session helper to the test session."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    try:
        yield session
    finally:
        SQLAlchemySession.set(None)
