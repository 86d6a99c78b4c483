"""Contract tests for the lock-protected in-memory partner directory."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import pytest
from freezegun import freeze_time
from ocpi_hub.models.enums import PartnerStatus, PartnerType, RoleType
from ocpi_hub.services._shared.context import CallContext
from ocpi_hub.services._shared.errors import (
    ConflictError,
    NotFoundError,
    OperationCanceled,
    OperationTimeout,
)
from ocpi_hub.services._shared.ports import DUPLICATE_PARTNER
from ocpi_hub.services.credentials.dto import CredentialRole, PartnerCredentials, PartnerRecord


def make_record(partner_id: str = "DE-ABC", token: str = "hub-1", **overrides) -> PartnerRecord:
    country, party = partner_id.split("-", 1)
    defaults = dict(
        partner_id=partner_id,
        name=f"{partner_id} Ltd",
        type=PartnerType.CPO,
        credentials=PartnerCredentials(
            token="partner-token",
            url="https://partner.example.com/versions",
            roles=(CredentialRole(role=RoleType.CPO, party_id=party, country_code=country),),
            version="2.3",
        ),
        token=token,
    )
    defaults.update(overrides)
    return PartnerRecord(**defaults)


class TestCreate:
    def test_stamps_id_and_timestamps(self, directory):
        with freeze_time("2025-01-01 12:00:00"):
            stored = directory.create(make_record())

        assert stored.id == 1
        assert stored.created_at == stored.updated_at
        assert stored.created_at.year == 2025
        assert directory.find_by_token("hub-1") == stored

    @pytest.mark.parametrize(
        "clash",
        [
            {"partner_id": "DE-ABC", "token": "hub-2"},
            {"partner_id": "NL-XYZ", "token": "hub-1"},
        ],
    )
    def test_unique_keys(self, directory, clash):
        directory.create(make_record())

        with pytest.raises(ConflictError) as exc:
            directory.create(make_record(**clash))

        assert str(exc.value) == DUPLICATE_PARTNER
        assert directory.count() == 1


class TestReads:
    def test_not_found(self, directory):
        with pytest.raises(NotFoundError, match="partner not found: DE-ABC"):
            directory.find_by_partner_id("DE-ABC")
        with pytest.raises(NotFoundError) as exc:
            directory.find_by_token("secret")
        # Tokens never leak into messages
        assert "secret" not in str(exc.value)

    def test_list_orders_newest_first(self, directory):
        with freeze_time("2025-01-01 12:00:00") as frozen:
            for i, pid in enumerate(["DE-AAA", "DE-BBB", "DE-CCC"]):
                directory.create(make_record(pid, token=f"t{i}"))
                frozen.tick(1)

        assert [p.partner_id for p in directory.list()] == ["DE-CCC", "DE-BBB", "DE-AAA"]
        assert [p.partner_id for p in directory.list(1, 1)] == ["DE-BBB"]
        assert directory.list(5, 10) == []

    def test_ties_break_on_id(self, directory):
        with freeze_time("2025-01-01 12:00:00"):
            directory.create(make_record("DE-AAA", token="t1"))
            directory.create(make_record("DE-BBB", token="t2"))

        assert [p.partner_id for p in directory.list()] == ["DE-BBB", "DE-AAA"]


class TestUpdate:
    def test_moves_token_index(self, directory):
        created = directory.create(make_record())

        updated = directory.update("DE-ABC", replace(created, token="hub-2", name="Renamed"))

        assert updated.name == "Renamed"
        assert updated.created_at == created.created_at
        assert directory.find_by_token("hub-2").partner_id == "DE-ABC"
        with pytest.raises(NotFoundError):
            directory.find_by_token("hub-1")

    def test_keeps_identity_and_type(self, directory):
        created = directory.create(make_record())

        updated = directory.update(
            "DE-ABC", replace(created, partner_id="NL-XYZ", type=PartnerType.EMSP)
        )

        assert updated.partner_id == "DE-ABC"
        assert updated.type == PartnerType.CPO

    def test_token_owned_by_another_partner(self, directory):
        first = directory.create(make_record())
        directory.create(make_record("NL-XYZ", token="hub-2"))

        with pytest.raises(ConflictError):
            directory.update("DE-ABC", replace(first, token="hub-2"))
        assert directory.find_by_token("hub-1").partner_id == "DE-ABC"

    def test_missing_partner(self, directory):
        with pytest.raises(NotFoundError):
            directory.update("DE-ABC", make_record())

    def test_update_status(self, directory):
        directory.create(make_record())

        stored = directory.update_status("DE-ABC", PartnerStatus.SUSPENDED)

        assert stored.status == PartnerStatus.SUSPENDED
        assert directory.find_by_token("hub-1").status == PartnerStatus.SUSPENDED


class TestDelete:
    def test_removes_both_keys(self, directory):
        directory.create(make_record())

        directory.delete("DE-ABC")

        assert directory.count() == 0
        with pytest.raises(NotFoundError):
            directory.find_by_token("hub-1")
        # Both keys are free again
        directory.create(make_record())

    def test_missing_partner(self, directory):
        with pytest.raises(NotFoundError):
            directory.delete("DE-ABC")


class TestContext:
    def test_cancelled_write_stores_nothing(self, directory):
        ctx = CallContext()
        ctx.cancel()

        with pytest.raises(OperationCanceled):
            directory.create(make_record(), ctx=ctx)
        assert directory.count() == 0

    def test_expired_read(self, directory):
        with pytest.raises(OperationTimeout):
            directory.count(ctx=CallContext(deadline=0.0))


class TestConcurrency:
    def test_same_identity_one_winner(self, directory):
        workers = 12
        barrier = threading.Barrier(workers)

        def _create(i: int):
            barrier.wait()
            try:
                return directory.create(make_record(token=f"hub-{i}"))
            except ConflictError as exc:
                return exc

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(_create, range(workers)))

        assert sum(not isinstance(r, ConflictError) for r in results) == 1
        assert directory.count() == 1
