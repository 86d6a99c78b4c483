"""
JSON logging for the hub.

Every record carries the correlation id of the request being served and, once
a hub token has been resolved, the partner that presented it. Correlation ids
are taken from ``X-Request-ID`` or ``X-Correlation-ID`` and echoed back on the
response.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# ``extra`` keys copied onto the JSON line when a record carries them
EXTRA_KEYS = frozenset(
    {"endpoint", "elapsed_ms", "partner_id", "partner_type", "status", "attempt"}
)


def ensure_request_id() -> str:
    """
    Return the correlation id of the current request.

    The first call in a request picks the incoming header (or a fresh uuid4)
    and pins it on ``flask.g``. Outside a request a throwaway id is returned.
    """
    if not has_request_context():
        return uuid4().hex
    request_id = g.get("request_id")
    if request_id is None:
        incoming = (request.headers.get(name) for name in CORRELATION_HEADERS)
        request_id = next((value for value in incoming if value), None) or uuid4().hex
        g.request_id = request_id
    return str(request_id)


def _authenticated_partner_id() -> str | None:
    partner = g.get("partner")
    return getattr(partner, "partner_id", None)


class RequestContextFilter(logging.Filter):
    """Stamp ``request_id`` and the authenticated ``partner_id`` on records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = ensure_request_id()
            if not hasattr(record, "partner_id"):
                partner_id = _authenticated_partner_id()
                if partner_id is not None:
                    record.partner_id = partner_id
        else:
            record.request_id = None
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line; ``extra`` keys listed in ``EXTRA_KEYS`` are kept."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        line.update(
            (key, getattr(record, key)) for key in sorted(EXTRA_KEYS) if hasattr(record, key)
        )
        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str)


def configure_logging(level: str | int = "INFO") -> None:
    """Send every logger through a single JSON handler on stdout."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Pin a correlation id on each request and return it in the response."""

    app.logger.addFilter(RequestContextFilter())

    @app.before_request
    def _pin_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["configure_logging", "init_app", "ensure_request_id", "JSONFormatter"]
