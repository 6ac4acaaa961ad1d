"""Ingestion flows: receipt image to fields, statement document to ledger rows.

Public API:
    - :func:`ingest_receipt`
    - :func:`ingest_statement`
    - :func:`import_statement_text` (the persistence half of a statement import)

Text extraction runs before any database work so a slow OCR/PDF call never
holds a transaction open. The import itself ("resolve default category,
filter duplicates, bulk insert") runs in one transaction: either every new
row lands or none does.
"""

from __future__ import annotations

from db.client import session_scope
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .dedup import partition_candidates
from .errors import PersistenceError
from .ledger import LedgerStore
from .logging_setup import get_logger
from .models import ImportResult, ReceiptExtraction
from .receipts import parse_receipt_text
from .statements import parse_statement_text
from .text_source import TextSource

_logger = get_logger("money_tracker.ingest")


def ingest_receipt(image: bytes, *, text_source: TextSource) -> ReceiptExtraction:
    """OCR a receipt image and extract merchant, total and date.

    Malformed images and OCR timeouts propagate from ``text_source``; a
    readable image always yields a result, possibly all defaults.
    """

    raw_text = text_source.image_to_text(image)
    extraction = parse_receipt_text(raw_text)
    _logger.info(
        "receipt processed: merchant=%r total=%s date=%s",
        extraction.merchant,
        extraction.total,
        extraction.date,
    )
    return extraction


def import_statement_text(
    raw_text: str, user_id: int, *, session_factory: sessionmaker[Session]
) -> ImportResult:
    """Parse statement text and persist the lines not already in the ledger.

    Raises :class:`PersistenceError` when the write fails and
    :class:`CategoryConflictError` when no fallback expense category can be
    resolved; nothing is written in either case.
    """

    candidates = parse_statement_text(raw_text)
    if not candidates:
        _logger.info("statement for user=%s had no transaction lines", user_id)
        return ImportResult(imported_count=0, duplicate_count=0)

    try:
        with session_scope(session_factory) as session:
            store = LedgerStore(session)
            to_insert, duplicates = partition_candidates(candidates, user_id, store.exists)
            imported = 0
            if to_insert:
                # One fallback category per import, resolved only when needed.
                category_id = store.find_or_create_default_expense_category(user_id)
                imported = store.bulk_insert(user_id, category_id, to_insert)
    except SQLAlchemyError as e:
        _logger.error("statement import failed for user=%s: %s", user_id, e)
        raise PersistenceError(f"statement import failed: {e}") from e

    _logger.info(
        "statement imported for user=%s: imported=%d duplicates=%d", user_id, imported, duplicates
    )
    return ImportResult(imported_count=imported, duplicate_count=duplicates)


def ingest_statement(
    document: bytes,
    user_id: int,
    *,
    text_source: TextSource,
    session_factory: sessionmaker[Session],
) -> ImportResult:
    """Extract text from a statement document and import its transactions."""

    raw_text = text_source.document_to_text(document)
    return import_statement_text(raw_text, user_id, session_factory=session_factory)


__all__ = ["ingest_receipt", "ingest_statement", "import_statement_text"]
