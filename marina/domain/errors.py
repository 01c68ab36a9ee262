"""Errors raised by marina operations.

Each error surfaces at the operation that produced it; nothing here is
meant to reach a global handler except for translation into an HTTP
response.
"""

from __future__ import annotations

from marina.domain.models import Conflict


class MarinaError(Exception):
    """Base class for all marina errors."""


class ValidationError(MarinaError):
    """A form value is missing or inconsistent. Nothing reached the store."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class ConflictError(MarinaError):
    """The proposed stay overlaps an existing reservation on the same dock."""

    def __init__(self, conflict: Conflict) -> None:
        self.conflict = conflict
        super().__init__(f"Date conflict: {conflict.message}")


class StoreError(MarinaError):
    """The record store failed; carries the store's own message text."""

    def __init__(self, operation: str, collection: str, message: str) -> None:
        self.operation = operation
        self.collection = collection
        self.detail = message
        super().__init__(f"Failed to {operation} {collection}: {message}")


class RecordNotFound(MarinaError):
    def __init__(self, collection: str, record_id) -> None:
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No {collection} record with id {record_id}")


class SubmissionInProgress(MarinaError):
    """A write for this form is still outstanding."""

    def __init__(self) -> None:
        super().__init__("A submission is already in progress.")


class ConfigurationError(MarinaError):
    pass
