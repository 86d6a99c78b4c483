"""Translate service-layer errors raised inside API handlers."""

from __future__ import annotations

from flask import Blueprint, Flask, Response

from ocpi_hub.core.errors import APIError, log_error
from ocpi_hub.services._shared.base import BaseService
from ocpi_hub.services._shared.errors import ServiceError

_translator = BaseService()


def service_error_response(err: ServiceError) -> Response:
    """Render a :class:`ServiceError` as an OCPI ``2001`` envelope.

    :param err: Domain error raised by a service, directory, or issuer.
    :type err: ServiceError
    :returns: Envelope response carrying the HTTP status of the error kind.
    :rtype: flask.Response
    """
    translated = _translator.translate_exceptions(err)
    if not isinstance(translated, APIError):  # pragma: no cover - every ServiceError maps
        raise err
    log_error(f"ServiceError[{translated.code}]", translated.status_code, translated.message)
    return translated.to_response()


def register_service_error_handlers(target: Flask | Blueprint) -> None:
    """Attach the :class:`ServiceError` handler to an app or blueprint."""

    @target.errorhandler(ServiceError)
    def _service_error_handler(err: ServiceError) -> Response:
        return service_error_response(err)
