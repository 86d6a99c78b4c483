from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from typing import Protocol

from ocpi_hub.models.base import utcnow
from ocpi_hub.models.enums import PartnerStatus
from ocpi_hub.services._shared.context import CallContext, ensure_context
from ocpi_hub.services._shared.errors import ConflictError, NotFoundError
from ocpi_hub.services.credentials.dto import PartnerRecord

DUPLICATE_PARTNER = "partner with this ID or token already exists"


class PartnerDirectory(Protocol):
    """
    Durable store of partners keyed by ``partner_id`` and by hub token.

    Both keys are unique; any violation surfaces as a single
    :class:`ConflictError`. Missing records raise :class:`NotFoundError`.
    Every method honours the deadline and cancellation of ``ctx``.
    """

    def create(self, partner: PartnerRecord, *, ctx: CallContext | None = None) -> PartnerRecord:
        """Insert a partner, stamping id and timestamps on the returned copy."""
        ...

    def find_by_partner_id(
        self, partner_id: str, *, ctx: CallContext | None = None
    ) -> PartnerRecord: ...

    def find_by_token(self, token: str, *, ctx: CallContext | None = None) -> PartnerRecord: ...

    def update(
        self, partner_id: str, partner: PartnerRecord, *, ctx: CallContext | None = None
    ) -> PartnerRecord:
        """Overwrite name, credentials, token and status; refresh ``updated_at``."""
        ...

    def delete(self, partner_id: str, *, ctx: CallContext | None = None) -> None: ...

    def update_status(
        self, partner_id: str, status: PartnerStatus, *, ctx: CallContext | None = None
    ) -> PartnerRecord: ...

    def list(
        self, offset: int = 0, limit: int = 50, *, ctx: CallContext | None = None
    ) -> list[PartnerRecord]:
        """Return partners ordered by ``created_at`` descending."""
        ...

    def count(self, *, ctx: CallContext | None = None) -> int: ...


class InMemoryPartnerDirectory(PartnerDirectory):
    """
    Thread-safe in-memory directory for unit tests and local runs.

    The whole check-then-write of every mutation happens under one lock, so
    concurrent registrations of the same identity resolve to exactly one
    winner, as with a unique index.
    """

    def __init__(self) -> None:
        self._by_partner_id: dict[str, PartnerRecord] = {}
        self._by_token: dict[str, str] = {}  # hub token -> partner_id
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    # ----------------------------- reads ------------------------------------

    def find_by_partner_id(self, partner_id: str, *, ctx: CallContext | None = None) -> PartnerRecord:
        ensure_context(ctx).raise_if_done()
        with self._lock:
            record = self._by_partner_id.get(partner_id)
        if record is None:
            raise NotFoundError("partner", partner_id)
        return record

    def find_by_token(self, token: str, *, ctx: CallContext | None = None) -> PartnerRecord:
        ensure_context(ctx).raise_if_done()
        with self._lock:
            partner_id = self._by_token.get(token)
            record = self._by_partner_id.get(partner_id) if partner_id is not None else None
        if record is None:
            raise NotFoundError("partner")
        return record

    def list(
        self, offset: int = 0, limit: int = 50, *, ctx: CallContext | None = None
    ) -> list[PartnerRecord]:
        ensure_context(ctx).raise_if_done()
        offset = max(0, int(offset))
        limit = max(0, int(limit))
        with self._lock:
            records = sorted(
                self._by_partner_id.values(),
                key=lambda r: (r.created_at, r.id or 0),
                reverse=True,
            )
        return records[offset : offset + limit]

    def count(self, *, ctx: CallContext | None = None) -> int:
        ensure_context(ctx).raise_if_done()
        with self._lock:
            return len(self._by_partner_id)

    # ----------------------------- writes -----------------------------------

    def create(self, partner: PartnerRecord, *, ctx: CallContext | None = None) -> PartnerRecord:
        ctx = ensure_context(ctx)
        ctx.raise_if_done()
        with self._lock:
            if partner.partner_id in self._by_partner_id or partner.token in self._by_token:
                raise ConflictError("partner", DUPLICATE_PARTNER)
            ctx.raise_if_done()
            now = utcnow()
            stored = replace(partner, id=next(self._ids), created_at=now, updated_at=now)
            self._by_partner_id[stored.partner_id] = stored
            self._by_token[stored.token] = stored.partner_id
        return stored

    def update(
        self, partner_id: str, partner: PartnerRecord, *, ctx: CallContext | None = None
    ) -> PartnerRecord:
        ctx = ensure_context(ctx)
        ctx.raise_if_done()
        with self._lock:
            current = self._by_partner_id.get(partner_id)
            if current is None:
                raise NotFoundError("partner", partner_id)
            owner = self._by_token.get(partner.token)
            if owner is not None and owner != partner_id:
                raise ConflictError("partner", DUPLICATE_PARTNER)
            ctx.raise_if_done()
            stored = replace(
                current,
                name=partner.name,
                credentials=partner.credentials,
                token=partner.token,
                status=partner.status,
                updated_at=utcnow(),
            )
            self._by_token.pop(current.token, None)
            self._by_token[stored.token] = partner_id
            self._by_partner_id[partner_id] = stored
        return stored

    def update_status(
        self, partner_id: str, status: PartnerStatus, *, ctx: CallContext | None = None
    ) -> PartnerRecord:
        ctx = ensure_context(ctx)
        ctx.raise_if_done()
        with self._lock:
            current = self._by_partner_id.get(partner_id)
            if current is None:
                raise NotFoundError("partner", partner_id)
            stored = replace(current, status=PartnerStatus(status), updated_at=utcnow())
            self._by_partner_id[partner_id] = stored
        return stored

    def delete(self, partner_id: str, *, ctx: CallContext | None = None) -> None:
        ctx = ensure_context(ctx)
        ctx.raise_if_done()
        with self._lock:
            current = self._by_partner_id.pop(partner_id, None)
            if current is None:
                raise NotFoundError("partner", partner_id)
            self._by_token.pop(current.token, None)
