"""
SQLAlchemy-backed :class:`PartnerDirectory`.

Uniqueness of ``partner_id`` and of the hub token is delegated to the
``uq_partners_partner_id`` / ``uq_partners_token`` constraints: concurrent
writers race at the database and the loser gets :class:`ConflictError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError

from ocpi_hub.models.enums import PartnerStatus
from ocpi_hub.models.partner import PARTNER_ID_CONSTRAINT, TOKEN_CONSTRAINT, Partner
from ocpi_hub.services._shared.context import CallContext, ensure_context
from ocpi_hub.services._shared.errors import (
    ConflictError,
    NotFoundError,
    OperationTimeout,
    violates,
)
from ocpi_hub.services._shared.ports import DUPLICATE_PARTNER
from ocpi_hub.services.credentials.dto import PartnerRecord
from ocpi_hub.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

from ._converters import mutable_fields, to_record, to_row

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SQLAlchemyPartnerDirectory:
    """
    Partner directory persisted in the ``partners`` table.

    Each call runs in its own unit of work; writes commit exactly once.
    Requires an active Flask application context.

    :param rw_uow_factory: Builds read-write units of work.
    :param ro_uow_factory: Builds read-only units of work.
    """

    def __init__(
        self,
        rw_uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork,
        ro_uow_factory: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
    ) -> None:
        self.rw_uow = rw_uow_factory
        self.ro_uow = ro_uow_factory

    # ----------------------------- reads ------------------------------------

    def find_by_partner_id(self, partner_id: str, *, ctx: CallContext | None = None) -> PartnerRecord:
        def _find(uow: SQLAlchemyReadOnlyUnitOfWork) -> PartnerRecord:
            row = uow.partners.get_by_partner_id(partner_id)
            if row is None:
                raise NotFoundError("partner", partner_id)
            return to_record(row)

        return self._read(_find, ctx)

    def find_by_token(self, token: str, *, ctx: CallContext | None = None) -> PartnerRecord:
        def _find(uow: SQLAlchemyReadOnlyUnitOfWork) -> PartnerRecord:
            row = uow.partners.get_by_token(token)
            if row is None:
                raise NotFoundError("partner")
            return to_record(row)

        return self._read(_find, ctx)

    def list(
        self, offset: int = 0, limit: int = 50, *, ctx: CallContext | None = None
    ) -> list[PartnerRecord]:
        def _list(uow: SQLAlchemyReadOnlyUnitOfWork) -> list[PartnerRecord]:
            page = uow.partners.list_recent(offset=offset, limit=limit)
            return [to_record(row) for row in page.items]

        return self._read(_list, ctx)

    def count(self, *, ctx: CallContext | None = None) -> int:
        return self._read(lambda uow: uow.partners.count(), ctx)

    # ----------------------------- writes -----------------------------------

    def create(self, partner: PartnerRecord, *, ctx: CallContext | None = None) -> PartnerRecord:
        def _create(uow: SQLAlchemyUnitOfWork) -> Partner:
            return uow.partners.add(to_row(partner))

        return self._write(_create, ctx, partner_id=partner.partner_id)

    def update(
        self, partner_id: str, partner: PartnerRecord, *, ctx: CallContext | None = None
    ) -> PartnerRecord:
        def _update(uow: SQLAlchemyUnitOfWork) -> Partner:
            row = uow.partners.get_by_partner_id(partner_id)
            if row is None:
                raise NotFoundError("partner", partner_id)
            return uow.partners.assign_updates(row, mutable_fields(partner))

        return self._write(_update, ctx, partner_id=partner_id)

    def update_status(
        self, partner_id: str, status: PartnerStatus, *, ctx: CallContext | None = None
    ) -> PartnerRecord:
        def _update_status(uow: SQLAlchemyUnitOfWork) -> Partner:
            row = uow.partners.get_by_partner_id(partner_id)
            if row is None:
                raise NotFoundError("partner", partner_id)
            return uow.partners.assign_updates(row, {"status": PartnerStatus(status)})

        return self._write(_update_status, ctx, partner_id=partner_id)

    def delete(self, partner_id: str, *, ctx: CallContext | None = None) -> None:
        def _delete(uow: SQLAlchemyUnitOfWork) -> None:
            row = uow.partners.get_by_partner_id(partner_id)
            if row is None:
                raise NotFoundError("partner", partner_id)
            uow.partners.delete(row)

        self._write(_delete, ctx, partner_id=partner_id, returns_row=False)

    # ----------------------------- internals --------------------------------

    def _read(self, fn: Callable[[SQLAlchemyReadOnlyUnitOfWork], T], ctx: CallContext | None) -> T:
        ctx = ensure_context(ctx)
        ctx.raise_if_done()
        with self._translate_timeouts(ctx), self.ro_uow() as uow:
            uow.bound_by(ctx)
            return fn(uow)

    def _write(
        self,
        fn: Callable[[SQLAlchemyUnitOfWork], Partner | None],
        ctx: CallContext | None,
        *,
        partner_id: str,
        returns_row: bool = True,
    ):
        ctx = ensure_context(ctx)
        ctx.raise_if_done()
        try:
            with self._translate_timeouts(ctx), self.rw_uow() as uow:
                uow.bound_by(ctx)
                row = fn(uow)
                record = to_record(row) if returns_row and row is not None else None
                # Abort before commit so an expired call persists nothing
                ctx.raise_if_done()
                return record
        except IntegrityError as exc:
            if violates(exc, PARTNER_ID_CONSTRAINT):
                key = "partner_id"
            elif violates(exc, TOKEN_CONSTRAINT):
                key = "token"
            else:
                key = "unknown"
            logger.info("partner write conflict on %s", key, extra={"partner_id": partner_id})
            raise ConflictError("partner", DUPLICATE_PARTNER) from exc

    @contextmanager
    def _translate_timeouts(self, ctx: CallContext) -> Iterator[None]:
        try:
            yield
        except OperationalError:
            # PostgreSQL cancels statements past statement_timeout
            if ctx.deadline is not None and ctx.remaining() == 0:
                raise OperationTimeout() from None
            raise
