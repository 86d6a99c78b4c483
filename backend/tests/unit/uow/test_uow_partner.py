from __future__ import annotations

import pytest
from ocpi_hub.models import Partner
from ocpi_hub.services._shared.context import CallContext
from ocpi_hub.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from ocpi_hub.uow import SQLAlchemyUnitOfWork as RWuow
from sqlalchemy import func, select
from tests.factories.partner import PartnerFactory


def _count(session) -> int:
    return session.execute(select(func.count(Partner.id))).scalar_one()


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_success(self, db, session):
        """
        GIVEN a new partner added inside a RW UoW
        WHEN the block exits cleanly
        THEN the row is committed
        """
        with RWuow() as uow:
            uow.partners.add(PartnerFactory.build())

        assert _count(session) == 1

    def test_rolls_back_on_error(self, db, session):
        """
        GIVEN a partner flushed inside a RW UoW
        WHEN the block raises
        THEN nothing is persisted and the error propagates
        """
        with pytest.raises(RuntimeError, match="boom"), RWuow() as uow:
            uow.partners.add(PartnerFactory.build())
            raise RuntimeError("boom")

        assert _count(session) == 0

    def test_bound_by_is_noop_on_sqlite(self, db):
        with RWuow() as uow:
            assert uow.dialect == "sqlite"
            uow.bound_by(CallContext.with_timeout(1))


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, db):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(PartnerFactory.build())
            uow.session.flush()

    def test_allows_reads(self, db, factories_session):
        PartnerFactory(partner_id="DE-ABC")

        with ROuow() as uow:
            assert uow.partners.get_by_partner_id("DE-ABC") is not None

    def test_disallows_commit(self, db):
        with ROuow() as uow, pytest.raises(RuntimeError, match="cannot commit"):
            uow.commit()

    def test_guard_is_removed_on_exit(self, db, session):
        """The flush guard must not outlive the RO block."""
        with ROuow():
            pass

        with RWuow() as uow:
            uow.partners.add(PartnerFactory.build())
        assert _count(session) == 1

    def test_enters_on_idle_scoped_session(self, db, session):
        session.remove()

        with ROuow() as uow:
            assert uow.partners.get_by_partner_id("DE-ABC") is None

    def test_enters_inside_open_transaction(self, db, session):
        _count(session)
        assert session().in_transaction()

        with ROuow() as uow:
            assert uow.partners.count() == 0
