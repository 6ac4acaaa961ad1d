from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from db.client import session_scope
from db.models.ledger import LedgerCategory, LedgerTransaction
from sqlalchemy.exc import OperationalError

from money_tracker.api import get_summary, import_statement_text, ingest_receipt, ingest_statement
from money_tracker.categories import list_categories
from money_tracker.errors import (
    CategoryConflictError,
    MalformedInputError,
    PersistenceError,
    TextExtractionTimeout,
)
from money_tracker.ledger import LedgerStore
from money_tracker.models import DateRange
from tests.helpers.db import count_rows, seed_categories
from tests.helpers.text_source import FakeTextSource

STATEMENT = "\n".join(
    [
        "Account summary",
        "03/01/2024   Coffee Shop Purchase   4.75",
        "03/01/2024   Coffee Shop Purchase   4.75",
        "03/04/2024   Rent Payment   1,250.00",
        "Closing balance 2,000.00",
    ]
)


def test_receipt_ingest_uses_image_text() -> None:
    source = FakeTextSource("Corner Store\nTOTAL: $9.99\n04/02/2024")

    out = ingest_receipt(b"img-bytes", text_source=source)

    assert (out.merchant, out.total, out.date) == ("Corner Store", Decimal("9.99"), "2024-04-02")
    assert source.calls == [("image", b"img-bytes")]


@pytest.mark.parametrize(
    "error", [MalformedInputError("bad image"), TextExtractionTimeout("too slow")]
)
def test_receipt_ingest_propagates_text_source_errors(error: Exception) -> None:
    with pytest.raises(type(error)):
        ingest_receipt(b"x", text_source=FakeTextSource(error=error))


def test_statement_import_is_idempotent(session_factory) -> None:
    first = import_statement_text(STATEMENT, 1, session_factory=session_factory)
    second = import_statement_text(STATEMENT, 1, session_factory=session_factory)

    # Identical lines within one document are both kept as new.
    assert first.to_dict() == {"imported": 3, "duplicates": 0}
    assert second.to_dict() == {"imported": 0, "duplicates": 3}
    assert count_rows(session_factory, LedgerTransaction) == 3


def test_default_category_is_created_once(session_factory) -> None:
    import_statement_text(STATEMENT, 1, session_factory=session_factory)
    import_statement_text("03/09/2024 Bakery 3.10", 1, session_factory=session_factory)

    with session_scope(session_factory) as s:
        cats = list_categories(s, user_id=1)
        rows = LedgerStore(s).list_transactions(1)

    assert [(c.name, c.type) for c in cats] == [("Uncategorized", "expense")]
    assert {r.category.id for r in rows if r.category} == {cats[0].id}


def test_existing_expense_category_is_reused(session_factory) -> None:
    ids = seed_categories(session_factory, 1, [("Salary", "income"), ("Misc", "expense")])

    import_statement_text(STATEMENT, 1, session_factory=session_factory)

    with session_scope(session_factory) as s:
        rows = LedgerStore(s).list_transactions(1)
    assert {r.category.id for r in rows if r.category} == {ids["Misc"]}
    assert count_rows(session_factory, LedgerCategory) == 2


@pytest.mark.parametrize("text", ["", "no transactions here\nPage 1"])
def test_empty_statement_touches_nothing(session_factory, text: str) -> None:
    result = import_statement_text(text, 1, session_factory=session_factory)

    assert (result.imported_count, result.duplicate_count) == (0, 0)
    assert count_rows(session_factory, LedgerCategory) == 0


def test_all_duplicates_do_not_create_default_category(session_factory) -> None:
    import_statement_text(STATEMENT, 1, session_factory=session_factory)
    with session_scope(session_factory) as s:
        s.query(LedgerCategory).update({LedgerCategory.type: "income"})

    result = import_statement_text(STATEMENT, 1, session_factory=session_factory)

    assert result.imported_count == 0
    assert count_rows(session_factory, LedgerCategory) == 1


def test_users_do_not_share_duplicates(session_factory) -> None:
    import_statement_text(STATEMENT, 1, session_factory=session_factory)

    other = import_statement_text(STATEMENT, 2, session_factory=session_factory)

    assert other.imported_count == 3
    assert count_rows(session_factory, LedgerCategory) == 2


def test_failed_insert_rolls_back_everything(session_factory, monkeypatch) -> None:
    def boom(self, user_id, category_id, records):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(LedgerStore, "bulk_insert", boom)

    with pytest.raises(PersistenceError):
        import_statement_text(STATEMENT, 1, session_factory=session_factory)

    # The default category created earlier in the same transaction is gone too.
    assert count_rows(session_factory, LedgerCategory) == 0
    assert count_rows(session_factory, LedgerTransaction) == 0


def test_statement_ingest_then_summary(session_factory) -> None:
    source = FakeTextSource(STATEMENT)

    result = ingest_statement(b"%PDF", 1, text_source=source, session_factory=session_factory)
    report = get_summary(1, session_factory=session_factory)
    march_first = get_summary(
        1, DateRange(date(2024, 3, 1), date(2024, 3, 1)), session_factory=session_factory
    )

    assert result.imported_count == 3
    assert source.calls == [("document", b"%PDF")]
    assert report.type_total("expense") == Decimal("1259.50")
    assert report.type_total("income") == Decimal("0.00")
    assert [(c.category, c.total) for c in report.category_totals] == [
        ("Uncategorized", Decimal("1259.50"))
    ]
    assert [(d.date.isoformat(), d.total) for d in march_first.daily_expense_series] == [
        ("2024-03-01", Decimal("9.50"))
    ]


def test_statement_extraction_failure_writes_nothing(session_factory) -> None:
    source = FakeTextSource(error=MalformedInputError("not a pdf"))

    with pytest.raises(MalformedInputError):
        ingest_statement(b"junk", 1, text_source=source, session_factory=session_factory)
    assert count_rows(session_factory, LedgerTransaction) == 0


def test_fallback_name_taken_by_income_category(session_factory) -> None:
    import_statement_text(STATEMENT, 1, session_factory=session_factory)
    with session_scope(session_factory) as s:
        s.query(LedgerCategory).update({LedgerCategory.type: "income"})

    with pytest.raises(CategoryConflictError, match="Uncategorized"):
        import_statement_text("03/09/2024 Bakery 3.10", 1, session_factory=session_factory)

    assert count_rows(session_factory, LedgerCategory) == 1
    assert count_rows(session_factory, LedgerTransaction) == 3


def test_any_expense_category_unblocks_import_after_fallback_conflict(session_factory) -> None:
    seed_categories(session_factory, 1, [("Uncategorized", "income")])
    with pytest.raises(CategoryConflictError):
        import_statement_text(STATEMENT, 1, session_factory=session_factory)

    ids = seed_categories(session_factory, 1, [("Groceries", "expense")])
    result = import_statement_text(STATEMENT, 1, session_factory=session_factory)

    assert result.imported_count == 3
    with session_scope(session_factory) as s:
        rows = LedgerStore(s).list_transactions(1)
    assert {r.category.id for r in rows if r.category} == {ids["Groceries"]}
