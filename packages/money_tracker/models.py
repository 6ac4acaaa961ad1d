"""Data models for ``money_tracker``.

Amounts are ``Decimal`` values with two fractional digits throughout; floats
never enter the ledger or the aggregates. Dates are ``datetime.date`` except on
:class:`ReceiptExtraction`, whose ``date`` is already an ISO ``YYYY-MM-DD``
string because it is handed straight back to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Literal

type CategoryType = Literal["income", "expense"]

UNKNOWN_MERCHANT = "Unknown Merchant"
DEFAULT_CATEGORY_NAME = "Uncategorized"
DEFAULT_CATEGORY_TYPE: CategoryType = "expense"
ZERO = Decimal("0.00")


# ---------------------------------------------------------------------------
# Extraction results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ReceiptExtraction:
    """Best-effort fields read from one receipt's OCR text.

    ``merchant`` defaults to :data:`UNKNOWN_MERCHANT`, ``total`` may be
    ``None``, and ``date`` is always present (falls back to today).
    """

    date: str
    merchant: str = UNKNOWN_MERCHANT
    total: Decimal | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"merchant": self.merchant, "total": self.total, "date": self.date}


@dataclass(frozen=True, slots=True)
class CandidateTransaction:
    """A (date, description, amount) triple read from one statement line."""

    date: date
    description: str
    amount: Decimal

    @property
    def iso_date(self) -> str:
        return self.date.isoformat()


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Outcome of one statement import."""

    imported_count: int
    duplicate_count: int

    def to_dict(self) -> dict[str, int]:
        return {"imported": self.imported_count, "duplicates": self.duplicate_count}


# ---------------------------------------------------------------------------
# Ledger read models
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DateRange:
    """Optional inclusive ``[start, end]`` window.

    Filtering only applies when both bounds are present; a half-open range is
    treated as "no range".
    """

    start: date | None = None
    end: date | None = None

    @property
    def is_bounded(self) -> bool:
        return self.start is not None and self.end is not None

    def contains(self, d: date) -> bool:
        start, end = self.start, self.end
        if start is None or end is None:
            return True
        return start <= d <= end


@dataclass(frozen=True, slots=True)
class CategoryRef:
    id: int
    name: str
    type: CategoryType


@dataclass(frozen=True, slots=True)
class LedgerRow:
    """A ledger transaction joined with its category.

    ``category`` is ``None`` when the referenced category row is absent;
    aggregation then substitutes the default ``Uncategorized``/``expense``
    category (see :meth:`effective_category`).
    """

    id: int
    user_id: int
    description: str
    amount: Decimal
    date: date
    category: CategoryRef | None = None

    def effective_category(self) -> tuple[str, CategoryType]:
        if self.category is None:
            return DEFAULT_CATEGORY_NAME, DEFAULT_CATEGORY_TYPE
        return self.category.name, self.category.type

    def to_dict(self) -> dict[str, Any]:
        name, kind = self.effective_category()
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "date": self.date.isoformat(),
            "category_id": self.category.id if self.category is not None else None,
            "category": name,
            "type": kind,
        }


@dataclass(frozen=True, slots=True)
class TransactionPage:
    total_items: int
    total_pages: int
    current_page: int
    items: list[LedgerRow] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalItems": self.total_items,
            "totalPages": self.total_pages,
            "currentPage": self.current_page,
            "transactions": [r.to_dict() for r in self.items],
        }


# ---------------------------------------------------------------------------
# Aggregate views
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CategoryTotal:
    category: str
    total: Decimal


@dataclass(frozen=True, slots=True)
class TypeTotal:
    type: CategoryType
    total: Decimal


@dataclass(frozen=True, slots=True)
class DailyExpense:
    date: date
    total: Decimal


@dataclass(frozen=True, slots=True)
class SummaryReport:
    """The three aggregate views returned by the reporting query."""

    category_totals: list[CategoryTotal] = field(default_factory=list)
    type_totals: list[TypeTotal] = field(default_factory=list)
    daily_expense_series: list[DailyExpense] = field(default_factory=list)

    def type_total(self, kind: CategoryType) -> Decimal:
        """Return the total for ``kind``; a missing group counts as zero."""

        for t in self.type_totals:
            if t.type == kind:
                return t.total
        return ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            "categoryTotals": [
                {"category": c.category, "total": c.total} for c in self.category_totals
            ],
            "typeTotals": [{"type": t.type, "total": t.total} for t in self.type_totals],
            "dailyExpenseSeries": [
                {"date": d.date.isoformat(), "total": d.total} for d in self.daily_expense_series
            ],
        }


__all__ = [
    "CategoryType",
    "UNKNOWN_MERCHANT",
    "DEFAULT_CATEGORY_NAME",
    "DEFAULT_CATEGORY_TYPE",
    "ZERO",
    "ReceiptExtraction",
    "CandidateTransaction",
    "ImportResult",
    "DateRange",
    "CategoryRef",
    "LedgerRow",
    "TransactionPage",
    "CategoryTotal",
    "TypeTotal",
    "DailyExpense",
    "SummaryReport",
]
