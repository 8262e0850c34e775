"""Typed domain errors.

Components raise these with enough context for the caller to decide between
retry and abort. The HTTP layer maps `status_code` onto the response; the
message is safe to show, internal detail goes to the log instead.
"""

from __future__ import annotations

from typing import Any


class QuoteDeskError(Exception):
    """Base class for all domain errors."""

    status_code: int = 400
    retryable: bool = False

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(QuoteDeskError):
    """Malformed input. `details` maps field names to problems."""

    status_code = 400


class ForbiddenError(QuoteDeskError):
    """Principal is outside the scope of the company or record."""

    status_code = 403


class NotFoundError(QuoteDeskError):
    """Referenced entity does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(f"{entity} not found", details={"id": str(entity_id)})
        self.entity = entity
        self.entity_id = entity_id


class DuplicateError(QuoteDeskError):
    """Unique constraint violated: tax id, representation pair, document number."""

    status_code = 409


class InvalidStateError(QuoteDeskError):
    """Transition not allowed from the record's current state."""

    status_code = 409


class SequenceExhaustedError(QuoteDeskError):
    """No unique document number could be allocated within the retry limit."""

    status_code = 503
    retryable = True


class RateProviderError(QuoteDeskError):
    """An external rate provider failed. Absorbed by the resolver's fallback chain."""

    status_code = 502

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason
