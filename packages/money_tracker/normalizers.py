"""Small value normalizers shared by parsers, the ledger store, and the CLI."""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

_CENT = Decimal("0.01")


def to_decimal_2(raw: Any) -> Decimal | None:
    """Coerce ``raw`` to a two-decimal ``Decimal`` or ``None``.

    Thousands separators (``,``) are dropped. Floats go through ``str`` so
    ``4.75`` becomes ``Decimal("4.75")`` rather than its binary expansion.
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        d = raw
    else:
        s = str(raw).strip().replace(",", "")
        if not s:
            return None
        try:
            d = Decimal(s)
        except (InvalidOperation, ValueError):
            return None
    if not d.is_finite():
        return None
    return d.quantize(_CENT, rounding=ROUND_HALF_UP)


def to_date(raw: Any) -> date | None:
    """Coerce ``raw`` (``date``/``datetime``/``YYYY-MM-DD`` string) to a date."""

    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    s = str(raw).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


def clean_text(value: str | None) -> str | None:
    """Collapse internal whitespace (including newlines) and trim."""

    if value is None:
        return None
    cleaned = re.sub(r"\s+", " ", value).strip()
    return cleaned if cleaned != "" else None


__all__ = ["to_decimal_2", "to_date", "clean_text"]
