"""Centralized OCPI-envelope error handling for the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from ocpi_hub.core.envelope import OCPIStatus, envelope_response
from ocpi_hub.core.logger import ensure_request_id

log = logging.getLogger(__name__)


def _error_response(*, message: str, http_status: int, ocpi_status: int) -> Response:
    """Render a failure as an OCPI envelope with ``data: null``."""
    return envelope_response(
        status_code=ocpi_status,
        status_message=message,
        data=None,
        http_status=http_status,
    )


class APIError(Exception):
    """
    Represent an error rendered as an OCPI envelope.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable kind, kept for logs. Defaults to ``"bad_request"``.
    ocpi_status : int, optional
        OCPI status code placed in the envelope. Defaults to ``2001``.

    Notes
    -----
    The envelope collapses every core failure to ``2001``; the HTTP status and
    ``code`` preserve the finer error kind for callers and operators.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        ocpi_status: int = OCPIStatus.CLIENT_ERROR,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.ocpi_status = int(ocpi_status)

    def to_response(self) -> Response:
        """Serialize the error into an OCPI envelope response."""
        return _error_response(
            message=self.message,
            http_status=self.status_code,
            ocpi_status=self.ocpi_status,
        )


# Domain conveniences
class MalformedRequest(APIError):
    """400 with OCPI ``1001`` for payloads rejected before the core runs."""

    def __init__(self, message: str = "Invalid request body") -> None:
        super().__init__(
            message,
            status_code=HTTPStatus.BAD_REQUEST,
            code="malformed_request",
            ocpi_status=OCPIStatus.MALFORMED_REQUEST,
        )


class BadRequest(APIError):
    """400 for business-rule violations on well-formed payloads."""

    def __init__(self, message: str = "Bad request") -> None:
        super().__init__(message, status_code=HTTPStatus.BAD_REQUEST, code="validation_error")


class NotFound(APIError):
    """404 when resources are missing."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


class Conflict(APIError):
    """409 for uniqueness/constraint collisions."""

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT, code="conflict")


class Unauthorized(APIError):
    """401 when authentication fails."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code="unauthorized")


class Forbidden(APIError):
    """403 when authorization denies access."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, status_code=HTTPStatus.FORBIDDEN, code="forbidden")


class InternalError(APIError):
    """500 for infrastructure failures surfaced by the core."""

    def __init__(self, message: str = "Internal error") -> None:
        super().__init__(
            message, status_code=HTTPStatus.INTERNAL_SERVER_ERROR, code="internal_error"
        )


class GatewayTimeout(APIError):
    """504 when a store call exceeded its deadline."""

    def __init__(self, message: str = "Operation timed out") -> None:
        super().__init__(message, status_code=HTTPStatus.GATEWAY_TIMEOUT, code="timeout")


class ServiceUnavailable(APIError):
    """503 when an operation was cancelled or the store is unreachable."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(
            message, status_code=HTTPStatus.SERVICE_UNAVAILABLE, code="service_unavailable"
        )


def log_error(kind: str, status: int, message: str, *, exc_info: bool = False) -> None:
    """Log 4xx as warnings and 5xx as errors with the correlation id."""
    level = log.error if status >= 500 else log.warning
    level(
        "%s: status=%s msg=%s request_id=%s",
        kind,
        status,
        message,
        ensure_request_id(),
        exc_info=exc_info,
    )


def init_app(app: Flask) -> None:
    """
    Attach envelope error handlers to the Flask app.

    Notes
    -----
    - Malformed payloads (bad JSON, schema failures) yield ``1001``.
    - Every other failure yields ``2001`` with the HTTP status of its kind.
    - 5xx are logged with ``exc_info`` for traceability; 4xx as warnings.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        log_error(f"APIError[{err.code}]", err.status_code, err.message)
        return err.to_response()

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        message = f"Invalid request body: {_flatten_messages(err.messages)}"
        log_error("ValidationError", HTTPStatus.BAD_REQUEST, message)
        return MalformedRequest(message).to_response()

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        if status == HTTPStatus.BAD_REQUEST:
            # Werkzeug raises BadRequest for undecodable JSON bodies
            message = f"Invalid request body: {err.description or 'malformed JSON'}"
            log_error("HTTPException", status, message)
            return MalformedRequest(message).to_response()
        message = (err.description or HTTPStatus(status).phrase).strip()
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        log_error("HTTPException", status, message)
        return _error_response(
            message=message, http_status=status, ocpi_status=OCPIStatus.CLIENT_ERROR
        )

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        log_error("IntegrityError", HTTPStatus.CONFLICT, "Resource conflict", exc_info=True)
        return Conflict("Resource conflict").to_response()

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        message = "Service temporarily unavailable"
        log_error("OperationalError", HTTPStatus.SERVICE_UNAVAILABLE, message, exc_info=True)
        return ServiceUnavailable(message).to_response()

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Never leak internal details to partners
        log_error(
            "Unhandled exception", HTTPStatus.INTERNAL_SERVER_ERROR, "Unexpected error", exc_info=True
        )
        return InternalError("Unexpected error").to_response()


def _flatten_messages(messages: Any) -> str:
    """Render Marshmallow's nested error mapping as ``field: reason`` pairs."""
    if isinstance(messages, dict):
        parts = []
        for key, value in messages.items():
            inner = _flatten_messages(value)
            parts.append(f"{key}: {inner}" if inner else str(key))
        return "; ".join(parts)
    if isinstance(messages, list | tuple):
        return ", ".join(_flatten_messages(item) for item in messages)
    return str(messages)
