"""Receipt field extraction from raw OCR text.

Public API:
    - :func:`parse_receipt_text`

The parser is pure and never raises: every field degrades to a documented
default (unknown merchant, no total, today's date) so an imperfect OCR pass
never blocks the caller.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation

from .logging_setup import get_logger
from .models import UNKNOWN_MERCHANT, ReceiptExtraction
from .rules import ExtractionRule, first_match, on_first_match, over_all_matches

_logger = get_logger("money_tracker.receipts")

# Optional single currency symbol between the label and the number.
_CURRENCY = "[$€£¥]"


def _to_decimal(s: str) -> Decimal | None:
    try:
        return Decimal(s)
    except InvalidOperation:
        return None


def _max_amount(found: list[str]) -> Decimal | None:
    values = [d for d in (_to_decimal(s) for s in found) if d is not None]
    return max(values) if values else None


def _expand_year(y: int, digits: int) -> int:
    # Two-digit years pivot at 50: 00-49 -> 20xx, 50-99 -> 19xx.
    if digits == 2:
        return 2000 + y if y < 50 else 1900 + y
    return y


def _date_from_match(m: re.Match[str]) -> str | None:
    """Normalize a matched date token to ``YYYY-MM-DD`` or return ``None``."""

    token = m.group(0)
    try:
        if m.group("iso") is not None:
            return date.fromisoformat(token).isoformat()
        month, day, year = re.split(r"[/-]", token)
        return date(_expand_year(int(year), len(year)), int(month), int(day)).isoformat()
    except ValueError:
        return None


TOTAL_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule(
        "labeled_total",
        re.compile(
            rf"(?:total|amount|due|balance)[\s:]*{_CURRENCY}?\s*(\d+\.\d{{2}})",
            re.IGNORECASE,
        ),
        on_first_match(lambda m: _to_decimal(m.group(1))),
    ),
    # The grand total is usually the largest figure on the receipt.
    ExtractionRule(
        "largest_amount",
        re.compile(r"\d+\.\d{2}"),
        over_all_matches(_max_amount),
    ),
)

DATE_RULE = ExtractionRule(
    "first_date_token",
    re.compile(r"\d{1,2}[/-]\d{1,2}[/-]\d{2,4}|(?P<iso>\d{4}-\d{2}-\d{2})"),
    on_first_match(_date_from_match),
)


def extract_merchant(raw_text: str) -> str:
    """Return the first non-blank line (trimmed), else :data:`UNKNOWN_MERCHANT`."""

    for line in raw_text.split("\n"):
        if line.strip():
            return line.strip()
    return UNKNOWN_MERCHANT


def extract_total(raw_text: str) -> Decimal | None:
    hit = first_match(TOTAL_RULES, raw_text)
    if hit is None:
        return None
    _logger.debug("receipt total %s via rule %s", hit.value, hit.rule)
    return hit.value


def extract_date(raw_text: str, *, today: date | None = None) -> str:
    """Return the first date token as ``YYYY-MM-DD``; today when absent/invalid.

    Only the first token is considered. An unparseable first token falls back
    to today rather than trying later tokens.
    """

    value = DATE_RULE.apply(raw_text)
    if value is not None:
        return value
    return (today or date.today()).isoformat()


def parse_receipt_text(raw_text: str, *, today: date | None = None) -> ReceiptExtraction:
    """Extract merchant, total and date from receipt OCR text.

    Parameters
    ----------
    raw_text:
        Text produced by the OCR engine; lines separated by ``\\n``.
    today:
        Fallback date; defaults to the local date at call time.
    """

    text = raw_text or ""
    result = ReceiptExtraction(
        merchant=extract_merchant(text),
        total=extract_total(text),
        date=extract_date(text, today=today),
    )
    _logger.debug(
        "parsed receipt merchant=%r total=%s date=%s", result.merchant, result.total, result.date
    )
    return result


__all__ = [
    "TOTAL_RULES",
    "DATE_RULE",
    "extract_merchant",
    "extract_total",
    "extract_date",
    "parse_receipt_text",
]
