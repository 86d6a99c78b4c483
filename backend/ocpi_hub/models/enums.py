"""Domain enumerations shared by models, services, and schemas."""

from __future__ import annotations

from enum import Enum


class PartnerType(str, Enum):
    """Kind of counterpart registered with the hub."""

    CPO = "CPO"  # Charge Point Operator
    EMSP = "EMSP"  # E-Mobility Service Provider


class PartnerStatus(str, Enum):
    """Lifecycle state of a partner registration."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class RoleType(str, Enum):
    """OCPI role declared in a credentials role entry."""

    CPO = "CPO"
    EMSP = "EMSP"
    HUB = "HUB"
    NSP = "NSP"  # Navigation Service Provider


class ImageCategory(str, Enum):
    """Category of a business-details logo."""

    CHARGER = "CHARGER"
    ENTRANCE = "ENTRANCE"
    LOCATION = "LOCATION"
    NETWORK = "NETWORK"
    OPERATOR = "OPERATOR"
    OWNER = "OWNER"
    OTHER = "OTHER"


__all__ = ["ImageCategory", "PartnerStatus", "PartnerType", "RoleType"]
