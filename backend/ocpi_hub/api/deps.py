"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, request

from ocpi_hub.core.config import HubSettings
from ocpi_hub.core.envelope import OCPIStatus, envelope_response
from ocpi_hub.models.enums import PartnerType
from ocpi_hub.services._shared.context import CallContext
from ocpi_hub.services.auth.resolver import AuthenticationResolver, extract_token
from ocpi_hub.services.credentials.dto import PartnerIdentity
from ocpi_hub.services.credentials.service import CredentialsService

F = TypeVar("F", bound=Callable[..., Any])

EXTENSION_KEY = "ocpi_hub"
PARTNER_TYPE_HEADER = "X-Partner-Type"


# ------------------------------ Wiring ---------------------------------------


def get_credentials_service() -> CredentialsService:
    """Return the credentials service wired by the application factory."""
    return cast(CredentialsService, current_app.extensions[EXTENSION_KEY]["credentials_service"])


def get_resolver() -> AuthenticationResolver:
    return cast(AuthenticationResolver, current_app.extensions[EXTENSION_KEY]["resolver"])


def get_hub_settings() -> HubSettings:
    return cast(HubSettings, current_app.extensions[EXTENSION_KEY]["settings"])


def call_context() -> CallContext:
    """
    Return the per-request :class:`CallContext`.

    Built once per request from ``STORE_TIMEOUT_SECONDS``; every directory
    call made while serving the request shares its deadline.
    """
    ctx = g.get("call_context")
    if ctx is None:
        ctx = CallContext.with_timeout(current_app.config.get("STORE_TIMEOUT_SECONDS"))
        g.call_context = ctx
    return cast(CallContext, ctx)


# ------------------------------ Request parsing ------------------------------


def partner_type_from_request() -> PartnerType:
    """
    Read the registering partner's type out of band.

    ``?type=`` wins over the ``X-Partner-Type`` header; absent or
    unrecognized values (matched case-sensitively) fall back to CPO.
    """
    raw = request.args.get("type") or request.headers.get(PARTNER_TYPE_HEADER) or ""
    try:
        return PartnerType(raw)
    except ValueError:
        return PartnerType.CPO


def bearer_token() -> str:
    """Return the hub token presented in ``Authorization``."""
    return extract_token(request.headers.get("Authorization"))


# ------------------------------ Auth gates -----------------------------------


def current_partner() -> PartnerIdentity | None:
    return cast(PartnerIdentity | None, g.get("partner"))


def require_partner(func: F) -> F:
    """Authenticate the request and attach the partner to ``flask.g``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        g.partner = get_resolver().resolve(
            request.headers.get("Authorization"), ctx=call_context()
        )
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_type(required: PartnerType) -> Callable[[F], F]:
    """Allow only partners of type ``required``; stack under :func:`require_partner`."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            AuthenticationResolver.ensure_type(current_partner(), required)
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


require_cpo = require_type(PartnerType.CPO)
require_emsp = require_type(PartnerType.EMSP)


# ------------------------------ Responses ------------------------------------


def ocpi_response(data: Any = None, *, status: int = 200) -> Response:
    """Wrap ``data`` in a success envelope."""
    return envelope_response(
        status_code=OCPIStatus.SUCCESS, status_message="Success", data=data, http_status=status
    )


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
