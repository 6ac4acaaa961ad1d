"""Aggregate views over a user's ledger.

Three read-only projections, recomputed per request:

- ``category_totals``: expense rows grouped by category name (sorted by name).
- ``type_totals``: all rows grouped by category type; only non-empty groups
  are emitted, in ``("income", "expense")`` order. Consumers read a missing
  group as zero via :meth:`SummaryReport.type_total`.
- ``daily_expense_series``: expense rows grouped by calendar date, ascending,
  sparse (no zero-filled days).

Sums are ``Decimal`` so repeated aggregation of the same rows is exact.
Rows without a category count as ``Uncategorized``/``expense``.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal

from db.models.ledger import CATEGORY_TYPES

from .ledger import LedgerStore
from .logging_setup import get_logger
from .models import (
    ZERO,
    CategoryTotal,
    DailyExpense,
    DateRange,
    LedgerRow,
    SummaryReport,
    TypeTotal,
)

_logger = get_logger("money_tracker.aggregation")


def _calendar_date(d: date) -> date:
    # Truncate any time component.
    return d.date() if isinstance(d, datetime) else d


def _expense_rows(rows: Iterable[LedgerRow]) -> Iterable[LedgerRow]:
    return (r for r in rows if r.effective_category()[1] == "expense")


def category_totals(rows: Iterable[LedgerRow]) -> list[CategoryTotal]:
    sums: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for r in _expense_rows(rows):
        name, _ = r.effective_category()
        sums[name] += r.amount
    return [CategoryTotal(category=name, total=sums[name]) for name in sorted(sums)]


def type_totals(rows: Iterable[LedgerRow]) -> list[TypeTotal]:
    sums: dict[str, Decimal] = {}
    for r in rows:
        _, kind = r.effective_category()
        sums[kind] = sums.get(kind, ZERO) + r.amount
    return [TypeTotal(type=k, total=sums[k]) for k in CATEGORY_TYPES if k in sums]  # type: ignore[arg-type]


def daily_expense_series(rows: Iterable[LedgerRow]) -> list[DailyExpense]:
    sums: dict[date, Decimal] = defaultdict(lambda: ZERO)
    for r in _expense_rows(rows):
        sums[_calendar_date(r.date)] += r.amount
    return [DailyExpense(date=d, total=sums[d]) for d in sorted(sums)]


def summarize_rows(
    rows: Iterable[LedgerRow], date_range: DateRange | None = None
) -> SummaryReport:
    """Compute all three views over ``rows`` restricted to ``date_range``."""

    window = date_range or DateRange()
    selected = [r for r in rows if window.contains(_calendar_date(r.date))]
    return SummaryReport(
        category_totals=category_totals(selected),
        type_totals=type_totals(selected),
        daily_expense_series=daily_expense_series(selected),
    )


def summarize(
    store: LedgerStore, user_id: int, date_range: DateRange | None = None
) -> SummaryReport:
    """Read the user's ledger through ``store`` and compute the summary."""

    rows = store.list_transactions(user_id, date_range=date_range)
    report = summarize_rows(rows, date_range)
    _logger.debug(
        "summary user=%s rows=%d categories=%d days=%d",
        user_id,
        len(rows),
        len(report.category_totals),
        len(report.daily_expense_series),
    )
    return report


__all__ = [
    "category_totals",
    "type_totals",
    "daily_expense_series",
    "summarize_rows",
    "summarize",
]
