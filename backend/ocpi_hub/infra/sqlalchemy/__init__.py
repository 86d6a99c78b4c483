"""SQLAlchemy adapters for service ports."""

from .partner_directory import SQLAlchemyPartnerDirectory

__all__ = ["SQLAlchemyPartnerDirectory"]
