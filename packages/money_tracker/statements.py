"""Statement line parser.

Targets a single statement layout: one transaction per line, shaped as

    MM/DD/YYYY   <description>   1,234.56

Lines of any other shape (headers, balances, page footers) are skipped
silently. This is deliberately not a general bank-statement reader.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from .logging_setup import get_logger
from .models import CandidateTransaction

_logger = get_logger("money_tracker.statements")

LINE_PATTERN = re.compile(
    r"(?P<date>\d{2}/\d{2}/\d{4})\s+"
    r"(?P<description>.+?)\s+"
    r"(?P<amount>(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2})"
)


def _parse_us_date(token: str) -> date | None:
    # Strict month-first parse; never locale dependent.
    try:
        return datetime.strptime(token, "%m/%d/%Y").date()
    except ValueError:
        return None


def parse_statement_line(line: str) -> CandidateTransaction | None:
    """Parse one line, returning ``None`` when it does not match in full."""

    m = LINE_PATTERN.fullmatch(line.strip())
    if m is None:
        return None
    d = _parse_us_date(m.group("date"))
    if d is None:
        return None
    try:
        amount = Decimal(m.group("amount").replace(",", ""))
    except InvalidOperation:  # pragma: no cover - pattern guarantees digits
        return None
    description = m.group("description").strip()
    if not description:
        return None
    return CandidateTransaction(date=d, description=description, amount=amount)


def parse_statement_text(raw_text: str) -> list[CandidateTransaction]:
    """Extract candidate transactions from statement text, in line order."""

    candidates: list[CandidateTransaction] = []
    lines = (raw_text or "").split("\n")
    for line in lines:
        cand = parse_statement_line(line)
        if cand is not None:
            candidates.append(cand)
    _logger.debug("statement: %d candidate(s) from %d line(s)", len(candidates), len(lines))
    return candidates


__all__ = ["LINE_PATTERN", "parse_statement_line", "parse_statement_text"]
