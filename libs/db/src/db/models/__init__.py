"""Shared SQLAlchemy models registry for the ledger database."""

from .ledger import CATEGORY_TYPES, Base, LedgerCategory, LedgerTransaction

__all__ = [
    "Base",
    "CATEGORY_TYPES",
    "LedgerCategory",
    "LedgerTransaction",
]
