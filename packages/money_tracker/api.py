"""Public API for the ``money_tracker`` package.

Ingestion lives in :mod:`money_tracker.ingest` and is re-exported here. The
reporting query and the assistant call are defined below. Every function takes
its collaborators (session factory, text source, client) explicitly.
"""

from __future__ import annotations

from typing import Any

from db.client import session_scope
from sqlalchemy.orm import Session, sessionmaker

from .aggregation import summarize, summarize_rows
from .ingest import import_statement_text, ingest_receipt, ingest_statement  # noqa: F401  (re-export)
from .ledger import LedgerStore
from .models import DateRange, SummaryReport


def get_summary(
    user_id: int,
    date_range: DateRange | None = None,
    *,
    session_factory: sessionmaker[Session],
) -> SummaryReport:
    """Return category totals, type totals and the daily expense series.

    An empty range is not an error: all three views come back empty.
    """

    with session_scope(session_factory) as session:
        return summarize(LedgerStore(session), user_id, date_range)


def ask_ledger(
    question: str,
    user_id: int,
    *,
    session_factory: sessionmaker[Session],
    model: str,
    date_range: DateRange | None = None,
    client: Any | None = None,
) -> str:
    """Answer a natural-language question using the user's ledger as context."""

    from .assistant import answer_question

    with session_scope(session_factory) as session:
        rows = LedgerStore(session).list_transactions(user_id, date_range=date_range)
    report = summarize_rows(rows, date_range)
    return answer_question(question, rows=rows, report=report, model=model, client=client)


__all__ = [
    "ingest_receipt",
    "ingest_statement",
    "import_statement_text",
    "get_summary",
    "ask_ledger",
]
