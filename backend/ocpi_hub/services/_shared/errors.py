"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between the partner
directory, the token issuer, and the credentials service.

The translation to OCPI envelopes is handled by ``ocpi_hub/core/errors.py``
via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g. ``uq_partners_token``).

    Returns
    -------
    bool
        True if the IntegrityError message names the given constraint.

    Notes
    -----
    PostgreSQL reports the constraint name; SQLite reports the column
    (``partners.token``), so the column suffix of the name is matched too.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    # uq_partners_token -> partners.token
    parts = name.split("_", 2)
    if len(parts) == 3 and parts[0] == "uq":
        return f"{parts[1]}.{parts[2]}" in message
    return False


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from directories, issuers or services.
    - ``BaseService.translate_exceptions`` later maps them to APIError.
    """

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class ValidationError(ServiceError):
    """Raised when credentials roles or identifier fields break a rule."""


@dataclass(slots=True, eq=False)
class NotFoundError(ServiceError):
    """
    Raised when an entity is absent from the directory.

    :param entity: Entity name (e.g., "partner").
    :type entity: str
    :param key: Identifier searched for; omitted for secret keys such as tokens.
    :type key: str | None
    """

    entity: str
    key: str | None = None

    def __str__(self) -> str:
        if self.key is None:
            return f"{self.entity} not found"
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True, eq=False)
class ConflictError(ServiceError):
    """
    Raised when a unique key or registration rule collides.

    :param entity: Entity name (e.g., "partner").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return self.detail


class UnauthorizedError(ServiceError):
    """Raised when a token is missing, unknown, or bound to an inactive partner."""

    def __init__(self, message: str = "invalid token") -> None:
        super().__init__(message)


class ForbiddenError(ServiceError):
    """Raised when an authenticated partner lacks the role an operation requires."""

    def __init__(self, message: str = "forbidden") -> None:
        super().__init__(message)


class InternalError(ServiceError):
    """Raised on token minting or store infrastructure failures."""

    def __init__(self, message: str = "internal error") -> None:
        super().__init__(message)


class OperationTimeout(ServiceError):
    """Raised when a directory call runs past its deadline."""

    def __init__(self, message: str = "operation timed out") -> None:
        super().__init__(message)


class OperationCanceled(ServiceError):
    """Raised when the caller cancelled the operation."""

    def __init__(self, message: str = "operation canceled") -> None:
        super().__init__(message)
