"""SQLAlchemy ORM models for QuoteDesk.

Import all models here so Alembic and Base.metadata.create_all() discover them.
"""

from __future__ import annotations

from quotedesk.models.audit import AuditLog
from quotedesk.models.base import Base
from quotedesk.models.client import Client
from quotedesk.models.company import Company
from quotedesk.models.config_entry import ConfigEntry
from quotedesk.models.enums import (
    QuotationStatus,
    RateSource,
    RepresentationRequestStatus,
    ResolutionDecision,
    Role,
)
from quotedesk.models.product import Product
from quotedesk.models.quotation import Quotation, QuotationItem
from quotedesk.models.representation import Representation, RepresentationRequest
from quotedesk.models.sequence import DocumentDailySequence
from quotedesk.models.seller import Seller

__all__ = [
    # Base
    "Base",
    # Models
    "AuditLog",
    "Client",
    "Company",
    "ConfigEntry",
    "DocumentDailySequence",
    "Product",
    "Quotation",
    "QuotationItem",
    "Representation",
    "RepresentationRequest",
    "Seller",
    # Enums
    "QuotationStatus",
    "RateSource",
    "RepresentationRequestStatus",
    "ResolutionDecision",
    "Role",
]
