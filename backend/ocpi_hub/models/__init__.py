from ocpi_hub.models.enums import ImageCategory, PartnerStatus, PartnerType, RoleType
from ocpi_hub.models.partner import Partner

__all__ = [
    "ImageCategory",
    "Partner",
    "PartnerStatus",
    "PartnerType",
    "RoleType",
]
