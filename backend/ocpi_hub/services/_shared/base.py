# ocpi_hub/services/_shared/base.py
from __future__ import annotations

from ocpi_hub.core import errors as api_errors
from ocpi_hub.services._shared.dto import PaginationIn
from ocpi_hub.services._shared.errors import (
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    OperationCanceled,
    OperationTimeout,
    ServiceError,
    UnauthorizedError,
    ValidationError,
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Centralize error translation.
    * Offer shared validation helpers (pagination).
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    Services never touch the global session; stores are injected as ports.
    """

    MAX_PAGE_SIZE = 500

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(self, *, offset: int, limit: int) -> PaginationIn:
        """
        Build a pagination window with basic clamping.

        :param offset: Number of entries to skip (negative → 0).
        :type offset: int
        :param limit: Page size, clamped to ``[1, MAX_PAGE_SIZE]``.
        :type limit: int
        :rtype: PaginationIn
        """
        offset = max(0, int(offset))
        limit = min(self.MAX_PAGE_SIZE, max(1, int(limit)))
        return PaginationIn(offset=offset, limit=limit)

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level errors.

        Every translated error carries OCPI status ``2001``; the HTTP status
        keeps the error kind.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, ValidationError):
            return api_errors.BadRequest(str(exc))

        if isinstance(exc, UnauthorizedError):
            return api_errors.Unauthorized(str(exc))

        if isinstance(exc, ForbiddenError):
            return api_errors.Forbidden(str(exc))

        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        if isinstance(exc, OperationTimeout):
            return api_errors.GatewayTimeout(str(exc))

        if isinstance(exc, OperationCanceled):
            return api_errors.ServiceUnavailable(str(exc))

        if isinstance(exc, InternalError):
            return api_errors.InternalError(str(exc))

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=str(exc), status_code=400, code="bad_request")

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
