"""OCPI response envelope shared by successful and failed responses."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import IntEnum
from typing import Any

from flask import Response, jsonify


class OCPIStatus(IntEnum):
    """OCPI status codes emitted by the hub."""

    SUCCESS = 1000
    MALFORMED_REQUEST = 1001
    CLIENT_ERROR = 2001


def utc_timestamp(now: datetime | None = None) -> str:
    """Return an RFC 3339 UTC timestamp with a ``Z`` suffix."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="seconds").replace("+00:00", "Z")


def build_envelope(
    *,
    status_code: int,
    status_message: str | None = None,
    data: Any = None,
) -> dict[str, Any]:
    """
    Build the OCPI envelope mapping.

    :param status_code: OCPI status code (``1000``, ``1001``, ``2001``).
    :type status_code: int
    :param status_message: Human-readable message, omitted when empty.
    :type status_message: str | None
    :param data: Payload (``None`` serializes as JSON ``null``).
    :type data: Any
    :returns: Envelope dictionary ready for ``jsonify``.
    :rtype: dict[str, Any]
    """
    envelope: dict[str, Any] = {"data": data, "status_code": int(status_code)}
    if status_message:
        envelope["status_message"] = status_message
    envelope["timestamp"] = utc_timestamp()
    return envelope


def envelope_response(
    *,
    status_code: int = OCPIStatus.SUCCESS,
    status_message: str | None = "Success",
    data: Any = None,
    http_status: int = 200,
) -> Response:
    """Return a Flask JSON response carrying an OCPI envelope."""
    response = jsonify(
        build_envelope(status_code=status_code, status_message=status_message, data=data)
    )
    response.status_code = int(http_status)
    return response


__all__ = ["OCPIStatus", "build_envelope", "envelope_response", "utc_timestamp"]
