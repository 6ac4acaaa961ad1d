"""Partition statement candidates into new rows and already-persisted duplicates.

The dedup key is the exact four-tuple ``(user_id, date, amount, description)``.
Candidates are checked only against rows already in the ledger: two identical
lines in the same import are both kept as new.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date
from decimal import Decimal
from typing import NamedTuple

from .logging_setup import get_logger
from .models import CandidateTransaction

_logger = get_logger("money_tracker.dedup")

type ExistsFn = Callable[[int, date, Decimal, str], bool]


class DedupResult(NamedTuple):
    to_insert: list[CandidateTransaction]
    duplicate_count: int


def partition_candidates(
    candidates: Iterable[CandidateTransaction],
    user_id: int,
    exists_fn: ExistsFn,
) -> DedupResult:
    """Split ``candidates`` (in input order) using ``exists_fn`` lookups."""

    to_insert: list[CandidateTransaction] = []
    duplicates = 0
    for cand in candidates:
        if exists_fn(user_id, cand.date, cand.amount, cand.description):
            duplicates += 1
            continue
        to_insert.append(cand)
    _logger.debug(
        "dedup user=%s new=%d duplicates=%d", user_id, len(to_insert), duplicates
    )
    return DedupResult(to_insert, duplicates)


__all__ = ["ExistsFn", "DedupResult", "partition_candidates"]
