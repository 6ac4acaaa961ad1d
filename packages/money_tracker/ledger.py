"""Ledger store: session-bound reads and writes over ``ledger_transactions``.

:class:`LedgerStore` is the boundary consumed by ingestion and reporting:

- ``find_existing`` / ``exists``: exact-match dedup lookup on
  ``(user_id, date, amount, description)``.
- ``find_or_create_default_expense_category``: lazy fallback category.
- ``bulk_insert``: write a batch of candidates under one category.
- ``list_transactions``: user-scoped range query joined with categories.

It also carries the manual transaction operations (create, update, delete,
paged listing). The store never commits; the caller owns the transaction
scope (see :func:`db.client.session_scope`).
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Any

from db.models.ledger import LedgerCategory, LedgerTransaction
from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from .categories import find_or_create_default_expense_category, get_category
from .errors import NotFoundError
from .logging_setup import get_logger
from .models import CandidateTransaction, CategoryRef, DateRange, LedgerRow, TransactionPage
from .normalizers import clean_text, to_date, to_decimal_2

_logger = get_logger("money_tracker.ledger")

_DEFAULT_PAGE_LIMIT = 10

_CATEGORY_JOIN = and_(
    LedgerCategory.id == LedgerTransaction.category_id,
    LedgerCategory.user_id == LedgerTransaction.user_id,
)


def _to_row(tx: LedgerTransaction, cat: LedgerCategory | None) -> LedgerRow:
    ref = CategoryRef(id=cat.id, name=cat.name, type=cat.type) if cat is not None else None  # type: ignore[arg-type]
    return LedgerRow(
        id=tx.id,
        user_id=tx.user_id,
        description=tx.description,
        amount=to_decimal_2(tx.amount) or Decimal("0.00"),
        date=tx.date,
        category=ref,
    )


class LedgerStore:
    """Ledger operations bound to one SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # ---- dedup boundary -------------------------------------------------

    def find_existing(
        self, user_id: int, date_: date, amount: Decimal, description: str
    ) -> LedgerTransaction | None:
        """Return a persisted row matching all four fields exactly, if any."""

        return (
            self.session.execute(
                select(LedgerTransaction)
                .where(
                    LedgerTransaction.user_id == user_id,
                    LedgerTransaction.date == date_,
                    LedgerTransaction.amount == amount,
                    LedgerTransaction.description == description,
                )
                .limit(1)
            )
            .scalars()
            .first()
        )

    def exists(self, user_id: int, date_: date, amount: Decimal, description: str) -> bool:
        return self.find_existing(user_id, date_, amount, description) is not None

    # ---- import writes --------------------------------------------------

    def find_or_create_default_expense_category(self, user_id: int) -> int:
        return find_or_create_default_expense_category(self.session, user_id=user_id)

    def bulk_insert(
        self, user_id: int, category_id: int, records: Iterable[CandidateTransaction]
    ) -> int:
        """Insert ``records`` under ``category_id`` and return the inserted count."""

        rows = [
            LedgerTransaction(
                user_id=user_id,
                category_id=category_id,
                description=r.description,
                amount=r.amount,
                date=r.date,
            )
            for r in records
        ]
        if not rows:
            return 0
        self.session.add_all(rows)
        self.session.flush()
        _logger.info(
            "inserted %d transaction(s) for user=%s category=%s", len(rows), user_id, category_id
        )
        return len(rows)

    # ---- reads ----------------------------------------------------------

    def _base_query(
        self,
        user_id: int,
        *,
        category_id: int | None = None,
        date_range: DateRange | None = None,
    ):
        stmt = (
            select(LedgerTransaction, LedgerCategory)
            .outerjoin(LedgerCategory, _CATEGORY_JOIN)
            .where(LedgerTransaction.user_id == user_id)
        )
        if category_id is not None:
            stmt = stmt.where(LedgerTransaction.category_id == category_id)
        if date_range is not None and date_range.is_bounded:
            stmt = stmt.where(LedgerTransaction.date.between(date_range.start, date_range.end))
        return stmt

    def list_transactions(
        self,
        user_id: int,
        *,
        category_id: int | None = None,
        date_range: DateRange | None = None,
    ) -> list[LedgerRow]:
        """Return the user's transactions (oldest first) joined with categories."""

        stmt = self._base_query(user_id, category_id=category_id, date_range=date_range).order_by(
            LedgerTransaction.date, LedgerTransaction.id
        )
        return [_to_row(tx, cat) for tx, cat in self.session.execute(stmt).all()]

    def page_transactions(
        self,
        user_id: int,
        *,
        date_range: DateRange | None = None,
        page: int = 1,
        limit: int = _DEFAULT_PAGE_LIMIT,
    ) -> TransactionPage:
        """Return one page of transactions, newest first."""

        page = page if page and page > 0 else 1
        limit = limit if limit and limit > 0 else _DEFAULT_PAGE_LIMIT

        count_stmt = select(func.count(LedgerTransaction.id)).where(
            LedgerTransaction.user_id == user_id
        )
        if date_range is not None and date_range.is_bounded:
            count_stmt = count_stmt.where(
                LedgerTransaction.date.between(date_range.start, date_range.end)
            )
        total = self.session.execute(count_stmt).scalar_one()

        stmt = (
            self._base_query(user_id, date_range=date_range)
            .order_by(LedgerTransaction.date.desc(), LedgerTransaction.id.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
        items = [_to_row(tx, cat) for tx, cat in self.session.execute(stmt).all()]
        return TransactionPage(
            total_items=total,
            total_pages=math.ceil(total / limit),
            current_page=page,
            items=items,
        )

    # ---- manual CRUD ----------------------------------------------------

    def _get_owned(self, user_id: int, transaction_id: int) -> LedgerTransaction:
        tx = (
            self.session.execute(
                select(LedgerTransaction).where(
                    LedgerTransaction.id == transaction_id, LedgerTransaction.user_id == user_id
                )
            )
            .scalars()
            .first()
        )
        if tx is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return tx

    def _row_for(self, tx: LedgerTransaction) -> LedgerRow:
        cat = self.session.get(LedgerCategory, tx.category_id)
        return _to_row(tx, cat)

    def create_transaction(
        self,
        user_id: int,
        *,
        category_id: int,
        description: str,
        amount: Any,
        date_: Any,
    ) -> LedgerRow:
        """Create one transaction after validating fields and category ownership."""

        values = _validated_fields(description=description, amount=amount, date_=date_)
        get_category(self.session, user_id=user_id, category_id=category_id)
        tx = LedgerTransaction(user_id=user_id, category_id=category_id, **values)
        self.session.add(tx)
        self.session.flush()
        return self._row_for(tx)

    def update_transaction(
        self,
        user_id: int,
        transaction_id: int,
        *,
        category_id: int | None = None,
        description: str | None = None,
        amount: Any = None,
        date_: Any = None,
    ) -> LedgerRow:
        """Apply a partial update; ``None`` leaves a field unchanged."""

        tx = self._get_owned(user_id, transaction_id)
        values = _validated_fields(
            description=description, amount=amount, date_=date_, partial=True
        )
        if category_id is not None:
            get_category(self.session, user_id=user_id, category_id=category_id)
            tx.category_id = category_id
        for key, val in values.items():
            setattr(tx, key, val)
        self.session.flush()
        return self._row_for(tx)

    def delete_transaction(self, user_id: int, transaction_id: int) -> None:
        tx = self._get_owned(user_id, transaction_id)
        self.session.delete(tx)
        self.session.flush()


def _validated_fields(
    *, description: Any, amount: Any, date_: Any, partial: bool = False
) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if description is not None or not partial:
        desc = clean_text(description)
        if desc is None:
            raise ValueError("description is required")
        out["description"] = desc
    if amount is not None or not partial:
        amt = to_decimal_2(amount)
        if amt is None:
            raise ValueError(f"amount must be a decimal number, got {amount!r}")
        out["amount"] = amt
    if date_ is not None or not partial:
        d = to_date(date_)
        if d is None:
            raise ValueError(f"date must be YYYY-MM-DD, got {date_!r}")
        out["date"] = d
    return out


__all__ = ["LedgerStore"]
