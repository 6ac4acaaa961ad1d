"""Exception types raised at the I/O boundaries of ``money_tracker``.

Parsers never raise for bad text; only text extraction and ledger writes do.
"""

from __future__ import annotations


class MoneyTrackerError(RuntimeError):
    """Base class for failures surfaced to callers of the ingest/report API."""


class MalformedInputError(MoneyTrackerError):
    """The binary given to a text source could not be decoded (bad image/PDF)."""


class TextExtractionTimeout(MoneyTrackerError):
    """OCR or document text extraction exceeded its configured time budget."""


class PersistenceError(MoneyTrackerError):
    """The ledger rejected a write; the surrounding transaction was rolled back."""


class NotFoundError(LookupError):
    """A category or transaction does not exist for the requesting user."""


class CategoryConflictError(ValueError):
    """A category with the same name already exists for the user."""


__all__ = [
    "MoneyTrackerError",
    "MalformedInputError",
    "TextExtractionTimeout",
    "PersistenceError",
    "NotFoundError",
    "CategoryConflictError",
]
