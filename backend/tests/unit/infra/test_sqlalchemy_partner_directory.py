"""
Tests for SQLAlchemyPartnerDirectory against SQLite.

The directory commits in its own units of work, so every test runs on a
freshly created schema (see the ``db`` fixture).
"""

from __future__ import annotations

import time
from dataclasses import replace

import pytest
from freezegun import freeze_time
from ocpi_hub.infra.sqlalchemy import SQLAlchemyPartnerDirectory
from ocpi_hub.models import Partner
from ocpi_hub.models.enums import ImageCategory, PartnerStatus, PartnerType, RoleType
from ocpi_hub.services._shared.context import CallContext
from ocpi_hub.services._shared.errors import (
    ConflictError,
    NotFoundError,
    OperationCanceled,
    OperationTimeout,
)
from ocpi_hub.services._shared.ports import DUPLICATE_PARTNER
from ocpi_hub.services.credentials.dto import (
    BusinessDetails,
    CredentialRole,
    Image,
    PartnerCredentials,
    PartnerRecord,
)
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from tests.factories.partner import PartnerFactory


def make_record(partner_id: str = "DE-ABC", token: str = "hub-1", **overrides) -> PartnerRecord:
    country, party = partner_id.split("-", 1)
    role = CredentialRole(
        role=RoleType.CPO,
        party_id=party,
        country_code=country,
        business_details=BusinessDetails(
            name="ACME Charging",
            website="https://acme.example.com",
            logo=Image(url="https://acme.example.com/logo.png", category=ImageCategory.NETWORK, type="png"),
        ),
    )
    defaults = dict(
        partner_id=partner_id,
        name="ACME Charging",
        type=PartnerType.CPO,
        credentials=PartnerCredentials(
            token="partner-token",
            url="https://acme.example.com/versions",
            roles=(role,),
            version="2.3",
        ),
        token=token,
    )
    defaults.update(overrides)
    return PartnerRecord(**defaults)


class _ExpiresAfter(CallContext):
    """Context that passes ``checks`` deadline checks and then times out."""

    def __init__(self, checks: int) -> None:
        super().__init__()
        self.checks = checks

    def raise_if_done(self) -> None:
        if self.checks <= 0:
            raise OperationTimeout()
        self.checks -= 1


@pytest.fixture
def sql_directory(db) -> SQLAlchemyPartnerDirectory:
    return SQLAlchemyPartnerDirectory()


def _rows(session) -> int:
    return session.execute(select(func.count(Partner.id))).scalar_one()


class TestCreate:
    def test_persists_and_maps_back(self, sql_directory, session):
        record = make_record()

        stored = sql_directory.create(record)

        assert stored.id is not None
        assert stored.created_at is not None
        assert stored.credentials == record.credentials
        assert stored.status == PartnerStatus.ACTIVE
        assert _rows(session) == 1

    def test_roles_round_trip_in_order(self, sql_directory):
        second = CredentialRole(role=RoleType.CPO, party_id="XYZ", country_code="NL")
        record = make_record()
        record = replace(
            record, credentials=replace(record.credentials, roles=(*record.credentials.roles, second))
        )
        sql_directory.create(record)

        loaded = sql_directory.find_by_partner_id("DE-ABC")

        assert loaded.credentials.roles == record.credentials.roles

    @pytest.mark.parametrize(
        "clash",
        [
            {"partner_id": "DE-ABC", "token": "hub-2"},
            {"partner_id": "NL-XYZ", "token": "hub-1"},
        ],
    )
    def test_unique_keys(self, sql_directory, session, clash):
        sql_directory.create(make_record())

        with pytest.raises(ConflictError) as exc:
            sql_directory.create(make_record(**clash))

        assert str(exc.value) == DUPLICATE_PARTNER
        assert _rows(session) == 1

    def test_context_expiring_before_commit_persists_nothing(self, sql_directory, session):
        with pytest.raises(OperationTimeout):
            sql_directory.create(make_record(), ctx=_ExpiresAfter(1))

        assert _rows(session) == 0

    def test_cancelled_context(self, sql_directory, session):
        ctx = CallContext()
        ctx.cancel()

        with pytest.raises(OperationCanceled):
            sql_directory.create(make_record(), ctx=ctx)
        assert _rows(session) == 0


class TestReads:
    def test_find_by_token(self, sql_directory, factories_session):
        PartnerFactory(partner_id="DE-ABC", token="hub-1", name="ACME Charging")

        found = sql_directory.find_by_token("hub-1")

        assert found.partner_id == "DE-ABC"
        assert found.name == "ACME Charging"
        assert found.credentials.roles[0].party_id == "ABC"

    def test_not_found(self, sql_directory):
        with pytest.raises(NotFoundError, match="partner not found: DE-ABC"):
            sql_directory.find_by_partner_id("DE-ABC")
        with pytest.raises(NotFoundError):
            sql_directory.find_by_token("hub-1")

    def test_list_and_count(self, sql_directory):
        with freeze_time("2025-02-01 08:00:00") as frozen:
            for i, pid in enumerate(["DE-AAA", "DE-BBB", "DE-CCC"]):
                sql_directory.create(make_record(pid, token=f"t{i}"))
                frozen.tick(5)

        assert [p.partner_id for p in sql_directory.list(0, 2)] == ["DE-CCC", "DE-BBB"]
        assert [p.partner_id for p in sql_directory.list(2, 2)] == ["DE-AAA"]
        assert sql_directory.count() == 3

    def test_statement_timeout_maps_to_operation_timeout(self, db):
        class _SlowPartners:
            def count(self):
                time.sleep(0.05)
                raise OperationalError("SELECT 1", {}, Exception("canceling statement"))

        class _SlowUoW:
            partners = _SlowPartners()

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return None

            def bound_by(self, ctx):
                return None

        directory = SQLAlchemyPartnerDirectory(ro_uow_factory=_SlowUoW)

        with pytest.raises(OperationTimeout):
            directory.count(ctx=CallContext.with_timeout(0.01))
        # Without a deadline the driver error is not reinterpreted
        with pytest.raises(OperationalError):
            directory.count()


class TestWrites:
    def test_update_rotates_token(self, sql_directory):
        created = sql_directory.create(make_record())
        new_credentials = replace(created.credentials, url="https://new.example.com/versions")

        updated = sql_directory.update(
            "DE-ABC", replace(created, token="hub-2", name="Renamed", credentials=new_credentials)
        )

        assert updated.token == "hub-2"
        assert updated.name == "Renamed"
        assert updated.credentials.url == "https://new.example.com/versions"
        assert sql_directory.find_by_token("hub-2").partner_id == "DE-ABC"
        with pytest.raises(NotFoundError):
            sql_directory.find_by_token("hub-1")

    def test_update_keeps_identity_and_type(self, sql_directory):
        created = sql_directory.create(make_record())

        updated = sql_directory.update(
            "DE-ABC", replace(created, partner_id="NL-XYZ", type=PartnerType.EMSP)
        )

        assert updated.partner_id == "DE-ABC"
        assert updated.type == PartnerType.CPO

    def test_update_token_collision(self, sql_directory):
        first = sql_directory.create(make_record())
        sql_directory.create(make_record("NL-XYZ", token="hub-2"))

        with pytest.raises(ConflictError):
            sql_directory.update("DE-ABC", replace(first, token="hub-2"))
        assert sql_directory.find_by_token("hub-1").partner_id == "DE-ABC"

    def test_update_missing(self, sql_directory):
        with pytest.raises(NotFoundError):
            sql_directory.update("DE-ABC", make_record())

    def test_update_status(self, sql_directory):
        sql_directory.create(make_record())

        stored = sql_directory.update_status("DE-ABC", PartnerStatus.INACTIVE)

        assert stored.status == PartnerStatus.INACTIVE
        assert sql_directory.find_by_partner_id("DE-ABC").status == PartnerStatus.INACTIVE

    def test_delete(self, sql_directory, session):
        sql_directory.create(make_record())

        sql_directory.delete("DE-ABC")

        assert _rows(session) == 0
        with pytest.raises(NotFoundError):
            sql_directory.delete("DE-ABC")
