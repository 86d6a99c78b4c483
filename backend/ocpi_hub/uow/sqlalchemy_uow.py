"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ocpi_hub.core.extensions import db
from ocpi_hub.repositories import PartnerRepository
from ocpi_hub.services._shared.context import CallContext
from ocpi_hub.uow.base import UnitOfWork


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.partners = PartnerRepository(session=self.session)

    @property
    def dialect(self) -> str:
        return self.session.get_bind().dialect.name

    def bound_by(self, ctx: CallContext) -> None:
        """
        Bound the statements of this transaction by the remaining deadline.

        Only PostgreSQL honours ``SET LOCAL statement_timeout``; other
        dialects rely on the checks the caller performs around each call.
        """
        remaining = ctx.remaining()
        if remaining is None or self.dialect != "postgresql":
            return
        millis = max(1, int(remaining * 1000))
        self.session.execute(text(f"SET LOCAL statement_timeout = {millis}"))


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    Every directory write runs in exactly one of these, so it either commits
    as a whole or leaves nothing behind.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Applies ``SET TRANSACTION READ ONLY`` on PostgreSQL when it opens the
      transaction itself.
    - Blocks ORM flushes of pending changes.
    - Always rolls back on exit and disallows ``commit()``.

    Notes
    -----
    *SQLite*: the read-only flag is not supported; the flush guard still
    prevents writes through the ORM.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)
        self._listener_installed = False
        self._guard = self._before_flush
        self._guarded: Session | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # scoped_session proxies no in_transaction(); ask the thread-local Session
        owns_transaction = not self.session().in_transaction()
        self._install_listener()
        if owns_transaction and self.dialect == "postgresql":
            try:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
            except SQLAlchemyError as exc:
                current_app.logger.warning(
                    "SET TRANSACTION READ ONLY failed (%s). Falling back to guards-only.", exc
                )
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            self._remove_listener()

    def commit(self) -> None:
        raise RuntimeError("Read-only UnitOfWork cannot commit.")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Guards -----------------------------------

    def _before_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError(
                "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
            )

    def _install_listener(self) -> None:
        if self._listener_installed:
            return
        # Listen on the thread-local Session instance, not the scoped proxy
        self._guarded = self.session()
        event.listen(self._guarded, "before_flush", self._guard)
        self._listener_installed = True

    def _remove_listener(self) -> None:
        if not self._listener_installed:
            return
        with suppress(Exception):
            event.remove(self._guarded, "before_flush", self._guard)
        self._listener_installed = False
