"""
Exceptions raised by the workflow and the storage layer.

The CLI and the dashboard catch ``CafeteriaError`` and show the message to
the operator; nothing here is retried automatically.
"""

from __future__ import annotations

from typing import Optional


class CafeteriaError(Exception):
    """Base class for every error reported back to the operator."""

    def __init__(self, message: str, item_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.item_id = item_id


class PreconditionViolation(CafeteriaError):
    """A transition was attempted from a state that does not allow it."""


class NotFound(CafeteriaError):
    """The referenced inventory item does not exist."""


class ConflictError(CafeteriaError):
    """The item changed between the state check and the write."""


class BackingStoreFailure(CafeteriaError):
    """The database could not be reached or returned an error."""


class SchemaMismatch(CafeteriaError):
    """Columns or tables the workflow needs are missing from the database."""
