"""Domain enums used across SQLAlchemy models and Pydantic schemas.

All enums use str mixin for JSON serialization; columns store the `.value`.
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Principal role as resolved by the identity provider."""

    ADMIN = "ADMIN"
    SELLER = "SELLER"
    CLIENT = "CLIENT"


class RepresentationRequestStatus(str, Enum):
    """Seller → company representation request lifecycle."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"  # terminal
    REJECTED = "REJECTED"  # terminal, may be re-submitted by the seller


class ResolutionDecision(str, Enum):
    """Admin decision on a pending representation request."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"


class QuotationStatus(str, Enum):
    """Quotation lifecycle states."""

    DRAFT = "DRAFT"
    SENT = "SENT"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class RateSource(str, Enum):
    """Provenance of a resolved exchange rate."""

    CUSTOM = "CUSTOM"
    CACHE = "CACHE"
    PROVIDER_PRIMARY = "PROVIDER_PRIMARY"
    PROVIDER_FALLBACK = "PROVIDER_FALLBACK"
    STATIC_DEFAULT = "STATIC_DEFAULT"
