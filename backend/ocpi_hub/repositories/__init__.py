"""Persistence-only repositories."""

from ocpi_hub.repositories.base import BaseRepository, Page, paginate_select
from ocpi_hub.repositories.partner import PartnerRepository

__all__ = ["BaseRepository", "Page", "PartnerRepository", "paginate_select"]
